"""
openframe - split-pane layout engine for dashboards and kiosks
"""

__version__ = "0.3.0"
