"""Helper functions for common dialog patterns in the operator console."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def confirm_leave_round(parent: QWidget, round_name: str) -> bool:
    """Ask before switching away from a round that is being presented.

    Args:
        parent: Parent widget for the dialog
        round_name: Name of the round currently on screen

    Returns:
        True if the operator confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Leave Round",
        f"'{round_name}' is still being presented. Switch rounds anyway?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget | None, title: str, message: str) -> None:
    """Show error dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Error message
    """
    QMessageBox.critical(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    """Show warning dialog."""
    QMessageBox.warning(parent, title, message)
