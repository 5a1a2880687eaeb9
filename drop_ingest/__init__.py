from .classify import EXECUTABLE_SUFFIXES, classify, label_for
from .gesture import DragGesture, DragState
from .messages import DropRequest, DropResponse
from .placement import make_cell_resolver, plan_placement
from .service import DropIngestService

__all__ = [
    "DragGesture",
    "DragState",
    "DropIngestService",
    "DropRequest",
    "DropResponse",
    "EXECUTABLE_SUFFIXES",
    "classify",
    "label_for",
    "make_cell_resolver",
    "plan_placement",
]
