"""
Textual rendering and editing of openframe layouts.

Example usage:
    from openframe.ui.layout import LayoutDesignerApp

    LayoutDesignerApp("kitchen").run()
"""

from .canvas import LayoutCanvas, SectionView, SlotView, structure_signature
from .designer import LayoutDesignerApp, run_designer
from .splitter import SplitterHandle

__all__ = [
    "LayoutCanvas",
    "LayoutDesignerApp",
    "SectionView",
    "SlotView",
    "SplitterHandle",
    "run_designer",
    "structure_signature",
]
