"""UI package for openframe terminal user interfaces.

This package provides the Textual-based layout designer:

- A canvas rendering a layout tree as nested split panes
- Draggable splitter handles between panes
- The designer app wiring key bindings to the editing session
"""
