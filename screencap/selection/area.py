#!/usr/bin/env python3
"""Interactive area selection.

Requires Screen Recording permission (probed first, with its time budget).
The origin of the picked rectangle is an approximation: the picker does not
report position, so the pointer position is taken as the centre of the
rectangle and the result is clamped to the screen's top-left.
"""

from __future__ import annotations

import sys
from typing import Callable, Optional, TextIO, Tuple

from screencap import permissions, tools
from screencap.selection.interactive import pick_size
from screencap.types import AreaSelection, CaptureConfig, Region


def estimate_origin(
    size: Tuple[int, int], pointer: Optional[Tuple[int, int]]
) -> Tuple[int, int]:
    """Top-left estimate: pointer minus half the size, never negative."""
    if pointer is None:
        return 0, 0
    width, height = size
    x, y = pointer
    return max(0, x - width // 2), max(0, y - height // 2)


def select_area(
    config: CaptureConfig,
    check_permission: Callable[[CaptureConfig], object] = permissions.require_permission,
    out: TextIO = sys.stderr,
) -> AreaSelection:
    """Run the area selection flow.

    Raises:
        PermissionDeniedError: If the permission probe does not grant access.
        SelectionError: If the pick was cancelled or unusable.
    """
    check_permission(config)

    if config.verbose:
        print("Drag to select the area to record (Esc cancels)...", file=out)

    width, height = pick_size(window=False)
    x, y = estimate_origin((width, height), tools.pointer_position())

    if config.verbose:
        print(f"Selected area: {width}x{height} at approximately ({x}, {y})", file=out)
    return AreaSelection(Region(width=width, height=height, x=x, y=y))
