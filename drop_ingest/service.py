"""Turns externally dropped file paths into buttons on the current page.

A drop goes through ``IDLE -> DRAGGING -> HOVERING -> DROPPED -> IDLE``. The
only mutation point is ``handle_request``, which applies every new button as
one ``GridAddressSpace.apply`` batch, so one drop is one config write.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from deck_core.grid import AddButton, GridAddressSpace
from deck_core.icon_cache import IconCache
from deck_core.models import ActionType, Button, Position
from deck_core.operation_log import OperationType
from diagnostics.logging_setup import get_logger
from runtime_bus import RuntimeBus, topics
from runtime_bus.messages import MessageEnvelope

from .classify import classify, label_for
from .gesture import DragGesture, DragState
from .messages import DropRequest, DropResponse
from .placement import plan_placement

logger = get_logger(__name__)

SOURCE = "drop_ingest.service"

CellResolver = Callable[[float, float], Optional[Position]]


class DropIngestService:
    def __init__(
        self,
        grid: GridAddressSpace,
        *,
        cell_resolver: Optional[CellResolver] = None,
        icon_cache: Optional[IconCache] = None,
        bus: Optional[RuntimeBus] = None,
        skip_occupied: bool = False,
    ) -> None:
        self._grid = grid
        self._resolve_cell = cell_resolver
        self._icons = icon_cache
        self._bus = bus
        self._skip_occupied = skip_occupied
        self._gesture = DragGesture()

    @property
    def state(self) -> DragState:
        return self._gesture.state

    @property
    def hover_cell(self) -> Optional[Position]:
        return self._gesture.hover_cell

    def set_cell_resolver(self, resolver: Optional[CellResolver]) -> None:
        self._resolve_cell = resolver

    # -- gesture -------------------------------------------------------------

    def drag_enter(self, has_files: bool = True) -> bool:
        if not has_files:
            return False
        return self._gesture.enter()

    def drag_move(self, x: float, y: float) -> Optional[Position]:
        cell = self._cell_at(x, y)
        self._gesture.hover(cell)
        return cell

    def drag_leave(self) -> None:
        if self._gesture.state is not DragState.IDLE:
            logger.debug("drag left the surface, gesture reset")
        self._gesture.reset()

    def drop_cancelled(self) -> None:
        if self._gesture.state is not DragState.IDLE:
            logger.info("drop cancelled")
        self._gesture.reset()

    def drop(self, paths: Sequence[str], x: float, y: float) -> DropResponse:
        if not self._gesture.drop():
            return self._reject("drop without an active drag gesture")
        try:
            return self.handle_request(DropRequest(paths=tuple(paths), x=float(x), y=float(y)))
        finally:
            self._gesture.reset()

    # -- pipeline ------------------------------------------------------------

    def handle_request(self, request: DropRequest) -> DropResponse:
        paths = [p for p in request.paths if str(p).strip()]
        if not paths:
            return self._reject("no files dropped")
        cell = self._cell_at(request.x, request.y)
        if cell is None:
            return self._reject(f"no grid cell at ({request.x:g}, {request.y:g})")
        page = self._grid.page
        if not page.contains(cell):
            return self._reject(
                f"drop cell {cell} is outside the page ({page.rows}x{page.cols})", cell=cell
            )

        positions, discarded = plan_placement(
            page, cell, len(paths), skip_occupied=self._skip_occupied
        )
        if discarded:
            logger.info("page full, discarding %s dropped paths", discarded)
        buttons = [self._button_for(path, position) for path, position in zip(paths, positions)]
        result = self._grid.apply(
            [AddButton(button.position, button) for button in buttons],
            operation_type=OperationType.ADD_BUTTONS,
        )
        if not result.ok:
            return self._reject(result.error or "failed to save dropped buttons", cell=cell)

        response = DropResponse(
            accepted=True,
            cell=cell,
            positions=tuple(positions),
            buttons=tuple(buttons),
            discarded=discarded,
        )
        logger.info("dropped %s paths at %s", len(buttons), cell)
        if self._bus is not None:
            self._bus.publish(topics.DROP_ACCEPTED, response.to_dict(), source=SOURCE)
        return response

    def handle_envelope(self, envelope: MessageEnvelope) -> Dict[str, object]:
        return self.handle_request(DropRequest.from_dict(envelope.payload)).to_dict()

    # -- internals -----------------------------------------------------------

    def _button_for(self, path: str, position: Position) -> Button:
        action_type, config = classify(path)
        icon = None
        if action_type is ActionType.LAUNCH_APP and self._icons is not None:
            entry = self._icons.get_or_extract(path)
            if entry is not None:
                icon = str(entry.file_path)
        return Button(
            position=position,
            action_type=action_type.value,
            label=label_for(path),
            config=config,
            icon=icon,
        )

    def _cell_at(self, x: float, y: float) -> Optional[Position]:
        if self._resolve_cell is None:
            return None
        return self._resolve_cell(x, y)

    def _reject(self, reason: str, *, cell: Optional[Position] = None) -> DropResponse:
        logger.warning("drop rejected: %s", reason)
        response = DropResponse(accepted=False, reason=reason, cell=cell)
        if self._bus is not None:
            self._bus.publish(topics.DROP_REJECTED, response.to_dict(), source=SOURCE)
        return response
