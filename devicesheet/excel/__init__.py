"""Workbook access: the openpyxl-backed Workbook and pandas sheet inspection."""

from .workbook import Workbook, cell_text

__all__ = [
    "Workbook",
    "cell_text",
]
