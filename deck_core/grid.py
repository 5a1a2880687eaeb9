"""Position-addressed mutations over the current page.

Every mutation builds a replacement page, commits the whole tree through the
``ConfigSession`` and only then becomes visible. A failed write leaves the
previous tree in place and comes back as ``MutationResult(ok=False)``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from diagnostics.logging_setup import get_logger
from runtime_bus import topics

from .config_store import ConfigSession
from .errors import ConfigStoreError, ConfigValidationError, GridBoundsError
from .models import Button, Page, Position
from .navigation import NavigationEngine
from .operation_log import OperationLog, OperationType, UndoEntry

logger = get_logger(__name__)

SOURCE = "deck_core.grid"
EDITABLE_FIELDS = ("label", "icon", "config", "style", "action_type")


@dataclass(frozen=True)
class AddButton:
    position: Position
    button: Button


@dataclass(frozen=True)
class RemoveButton:
    position: Position


GridOp = Union[AddButton, RemoveButton]


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    error: Optional[str] = None
    affected_positions: Tuple[Position, ...] = ()
    page: Optional[Page] = None
    written: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "error": self.error,
            "affected_positions": [p.to_dict() for p in self.affected_positions],
            "written": self.written,
        }


@dataclass
class _PageDraft:
    page: Page
    slots: Dict[Position, Button] = field(default_factory=dict)
    previous: Dict[Position, Optional[Button]] = field(default_factory=dict)
    touched: List[Position] = field(default_factory=list)

    @classmethod
    def of(cls, page: Page) -> "_PageDraft":
        return cls(page=page, slots={b.position: b for b in page.buttons})

    def _touch(self, position: Position) -> None:
        if position not in self.previous:
            self.previous[position] = self.slots.get(position)
            self.touched.append(position)

    def put(self, position: Position, button: Button) -> None:
        _check_bounds(self.page, position)
        self._touch(position)
        self.slots.pop(position, None)
        self.slots[position] = button.at(position)

    def drop(self, position: Position) -> None:
        self._touch(position)
        self.slots.pop(position, None)

    def build(self) -> Page:
        return self.page.with_buttons(self.slots.values())


class GridAddressSpace:
    def __init__(
        self,
        session: ConfigSession,
        navigation: NavigationEngine,
        operation_log: Optional[OperationLog] = None,
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._session = session
        self._navigation = navigation
        self._log = operation_log if operation_log is not None else OperationLog()
        self._clock = clock or time.time
        session.add_listener(navigation.attach)

    @property
    def page(self) -> Page:
        return self._navigation.current_page()

    @property
    def operation_log(self) -> OperationLog:
        return self._log

    def button_at(self, position: Position) -> Optional[Button]:
        return self.page.button_at(position)

    # -- single operations ---------------------------------------------------

    def add(self, position: Position, button: Button) -> MutationResult:
        return self.apply([AddButton(position, button)])

    def remove(self, position: Position) -> MutationResult:
        return self.apply([RemoveButton(position)])

    def update(self, position: Position, **changes: Any) -> MutationResult:
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            return self._fail(f"cannot edit button fields: {', '.join(unknown)}")
        current = self.page.button_at(position)
        if current is None:
            return self._fail(f"no button at {position}")
        return self.apply(
            [AddButton(position, replace(current, **changes))],
            operation_type=OperationType.MODIFY_BUTTONS,
        )

    def move(self, source: Position, target: Position) -> MutationResult:
        page = self.page
        for position in (source, target):
            if not page.contains(position):
                return self._fail(_bounds_message(page, position))
        moving = page.button_at(source)
        if moving is None:
            return self._fail(f"no button at {source}")
        if source == target:
            return MutationResult(ok=True, page=page)
        ops: List[GridOp] = [RemoveButton(source)]
        displaced = page.button_at(target)
        if displaced is not None:
            ops.append(AddButton(source, displaced))
        ops.append(AddButton(target, moving))
        return self.apply(ops, operation_type=OperationType.MODIFY_BUTTONS)

    def apply_style(
        self,
        style: Optional[Mapping[str, Any]],
        positions: Optional[Iterable[Position]] = None,
    ) -> MutationResult:
        page = self.page
        targets = list(positions) if positions is not None else [b.position for b in page.buttons]
        ops: List[GridOp] = []
        for position in targets:
            button = page.button_at(position)
            if button is None:
                continue
            new_style = dict(style) if style is not None else None
            ops.append(AddButton(position, replace(button, style=new_style)))
        return self.apply(ops, operation_type=OperationType.MODIFY_BUTTONS)

    def resize(self, rows: int, cols: int) -> MutationResult:
        try:
            rows, cols = int(rows), int(cols)
        except (TypeError, ValueError):
            return self._fail(f"invalid page dimensions: {rows!r}x{cols!r}")
        if rows < 1 or cols < 1:
            return self._fail("page dimensions must be greater than 0")
        page = self.page
        resized = replace(page, rows=rows, cols=cols)
        kept = [b for b in page.buttons if resized.contains(b.position)]
        dropped = tuple(b.position for b in page.buttons if not resized.contains(b.position))
        result = self._commit(resized.with_buttons(kept), dropped)
        if result.ok:
            if dropped:
                logger.info("resize to %sx%s discarded buttons at %s", rows, cols, list(map(str, dropped)))
            self._log.clear()
        return result

    # -- batches -------------------------------------------------------------

    def apply(
        self,
        ops: Sequence[GridOp],
        *,
        operation_type: Optional[OperationType] = None,
    ) -> MutationResult:
        """Apply ``ops`` in order to a copy of the page and write once."""
        page = self.page
        draft = _PageDraft.of(page)
        try:
            for op in ops:
                if isinstance(op, AddButton):
                    draft.put(op.position, op.button)
                elif isinstance(op, RemoveButton):
                    draft.drop(op.position)
                else:
                    raise TypeError(f"unsupported grid operation: {op!r}")
        except GridBoundsError as exc:
            return self._fail(str(exc))

        new_page = draft.build()
        affected = tuple(draft.touched)
        if new_page == page:
            return MutationResult(ok=True, affected_positions=affected, page=page)

        result = self._commit(new_page, affected)
        if result.ok:
            self._log.record(
                UndoEntry(
                    operation_type=operation_type or _infer_type(ops),
                    affected_positions=affected,
                    timestamp=self._clock(),
                    profile_name=self._navigation.get_current_profile().name,
                    page_index=self._navigation.current_page_index,
                    previous_buttons=tuple(draft.previous[p] for p in affected),
                )
            )
        return result

    def undo(self) -> MutationResult:
        """Restore the buttons replaced by the most recent batch."""
        entry = self._log.peek()
        if entry is None:
            return self._fail("nothing to undo")
        config = self._session.config
        profile_index = config.find_profile(entry.profile_name)
        if profile_index < 0 or entry.page_index >= len(config.profiles[profile_index].pages):
            self._log.clear()
            return self._fail("page of the last operation no longer exists")
        page = config.page(profile_index, entry.page_index)
        draft = _PageDraft.of(page)
        for position, previous in zip(entry.affected_positions, entry.previous_buttons):
            if previous is None:
                draft.drop(position)
            elif page.contains(position):
                draft.put(position, previous)
        result = self._commit(
            draft.build(), entry.affected_positions, profile_index=profile_index, page_index=entry.page_index
        )
        if result.ok:
            self._log.pop()
            logger.info("undid %s at %s", entry.operation_type.value, list(map(str, entry.affected_positions)))
        return result

    # -- internals -----------------------------------------------------------

    def _commit(
        self,
        new_page: Page,
        affected: Tuple[Position, ...],
        *,
        profile_index: Optional[int] = None,
        page_index: Optional[int] = None,
    ) -> MutationResult:
        p_index = self._navigation.current_profile_index if profile_index is None else profile_index
        g_index = self._navigation.current_page_index if page_index is None else page_index
        candidate = self._session.config.with_page(p_index, g_index, new_page)
        try:
            self._session.commit(candidate)
        except (ConfigStoreError, ConfigValidationError) as exc:
            logger.error("grid mutation aborted: %s", exc)
            self._navigation.bus.publish(
                topics.CONFIG_COMMIT_FAILED,
                {"error": str(exc), "affected_positions": [p.to_dict() for p in affected]},
                source=SOURCE,
            )
            return MutationResult(ok=False, error=str(exc), affected_positions=affected)
        self._navigation.bus.publish(
            topics.CONFIG_COMMITTED,
            {
                "profile_index": p_index,
                "page_index": g_index,
                "affected_positions": [p.to_dict() for p in affected],
            },
            source=SOURCE,
        )
        return MutationResult(ok=True, affected_positions=affected, page=new_page, written=True)

    def _fail(self, message: str) -> MutationResult:
        logger.warning(message)
        self._navigation.bus.publish(topics.WARNING, {"source": "grid", "error": message}, source=SOURCE)
        return MutationResult(ok=False, error=message)


def _check_bounds(page: Page, position: Position) -> None:
    if not page.contains(position):
        raise GridBoundsError(_bounds_message(page, position))


def _bounds_message(page: Page, position: Position) -> str:
    return f"position {position} is outside grid bounds ({page.rows}x{page.cols})"


def _infer_type(ops: Sequence[GridOp]) -> OperationType:
    if ops and all(isinstance(op, AddButton) for op in ops):
        return OperationType.ADD_BUTTONS
    if ops and all(isinstance(op, RemoveButton) for op in ops):
        return OperationType.REMOVE_BUTTONS
    return OperationType.MODIFY_BUTTONS
