#!/usr/bin/env python3
"""Selection flows: pick a monitor, an area, or a window to record.

Each flow returns one SelectionResult variant or raises SelectionError
(PermissionDeniedError for area selection without permission). Flows are
mutually exclusive; at most one runs per invocation.

Usage:
    ```python
    from screencap.selection import get_selector

    result = get_selector("area")(config)
    ```
"""

from __future__ import annotations

from typing import Callable, Dict

from screencap.selection.area import estimate_origin, select_area
from screencap.selection.monitor import MonitorCandidate, select_monitor
from screencap.selection.window import select_window
from screencap.types import CaptureConfig, SelectionResult

__all__ = [
    "SELECTORS",
    "get_selector",
    "select_monitor",
    "select_area",
    "select_window",
    "estimate_origin",
    "MonitorCandidate",
]

SELECTORS: Dict[str, Callable[[CaptureConfig], SelectionResult]] = {
    "monitor": select_monitor,
    "area": select_area,
    "window": select_window,
}


def get_selector(name: str) -> Callable[[CaptureConfig], SelectionResult]:
    """Look up a selection flow by name.

    Raises:
        KeyError: If the name is not a known flow.
    """
    if name not in SELECTORS:
        raise KeyError(
            f"Unknown selection mode: '{name}'. "
            f"Available modes: {', '.join(SELECTORS)}"
        )
    return SELECTORS[name]
