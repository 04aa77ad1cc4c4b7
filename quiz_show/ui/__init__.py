"""Qt UI components for the operator console."""

from .dialog_helpers import confirm_leave_round, show_error, show_warning
from .operator_window import OperatorMainWindow

__all__ = [
    "OperatorMainWindow",
    "confirm_leave_round",
    "show_error",
    "show_warning",
]
