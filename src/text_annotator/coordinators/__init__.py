"""Coordinators - Orchestration layer connecting input events with annotation state."""

from .bulk_delete_coordinator import BulkDeleteCoordinator
from .hover_popup import HoverPopupCoordinator
from .lifecycle_manager import LifecycleManager
from .selection_controller import SelectionController, SelectionState

__all__ = [
    "LifecycleManager",
    "BulkDeleteCoordinator",
    "HoverPopupCoordinator",
    "SelectionController",
    "SelectionState",
]
