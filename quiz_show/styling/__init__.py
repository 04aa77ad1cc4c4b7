"""Styling module for the QuizShow operator console."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
