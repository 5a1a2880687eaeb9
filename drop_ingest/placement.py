from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Tuple

from deck_core.models import Page, Position


def cells_from(page: Page, start: Position) -> Iterator[Position]:
    """Row-major cells from ``start`` to the end of the page."""
    row, col = start.row, start.col
    while row <= page.rows:
        while col <= page.cols:
            yield Position(row, col)
            col += 1
        row += 1
        col = 1


def plan_placement(
    page: Page,
    start: Position,
    count: int,
    *,
    skip_occupied: bool = False,
) -> Tuple[List[Position], int]:
    """Positions for ``count`` items and how many did not fit."""
    positions: List[Position] = []
    if count <= 0 or not page.contains(start):
        return positions, max(0, count)
    occupied = {b.position for b in page.buttons} if skip_occupied else set()
    for cell in cells_from(page, start):
        if len(positions) >= count:
            break
        if cell in occupied:
            continue
        positions.append(cell)
    return positions, count - len(positions)


def make_cell_resolver(
    cell_px: float,
    gap_px: float = 0.0,
    origin: Tuple[float, float] = (0.0, 0.0),
) -> Callable[[float, float], Optional[Position]]:
    """Pointer coordinates to the nearest cell of a uniform grid.

    Points in a gap belong to the cell before it. Coordinates left of or
    above the origin resolve to ``None``; the caller checks page bounds.
    """
    pitch = float(cell_px) + max(0.0, float(gap_px))
    ox, oy = origin

    def resolve(x: float, y: float) -> Optional[Position]:
        if pitch <= 0 or x < ox or y < oy:
            return None
        return Position(int((y - oy) // pitch) + 1, int((x - ox) // pitch) + 1)

    return resolve
