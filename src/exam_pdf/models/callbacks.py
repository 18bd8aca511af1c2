"""Callback definitions for diagram processing progress reporting."""

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class DiagramCallbacks:
    """Callbacks that the diagram processor will call to report progress"""

    on_page_render: Optional[Callable[[int], None]] = None
    on_diagram_cropped: Optional[Callable[[str, int], None]] = None
    on_error: Optional[Callable[[str, str], None]] = None
