#!/usr/bin/env python3
"""Shared step of area and window selection: run the picker, measure the image.

``screencapture`` only returns the cropped image, never where it came from,
so the only thing this step can report is the picked size.
"""

from __future__ import annotations

import os
import tempfile
from typing import Tuple

from screencap import tools
from screencap.types import MIN_REGION_SIZE, SelectionError


def pick_size(window: bool = False) -> Tuple[int, int]:
    """Let the user pick an area (or window) and return its pixel size.

    The picked image is written to a private temporary directory that is
    removed before returning, whether the pick succeeded or not.

    Raises:
        SelectionError: If the pick was cancelled, produced no readable
            image, or is smaller than MIN_REGION_SIZE in either direction.
    """
    what = "Window" if window else "Area"
    with tempfile.TemporaryDirectory(prefix="screencap-select-") as tmp:
        path = os.path.join(tmp, "selection.png")
        if not tools.capture_interactive(path, window=window):
            raise SelectionError(f"{what} selection cancelled")
        size = tools.image_size(path)

    if size is None:
        raise SelectionError(f"{what} selection failed: could not read image size")

    width, height = size
    if width < MIN_REGION_SIZE or height < MIN_REGION_SIZE:
        raise SelectionError(
            f"{what} selection too small: {width}x{height} "
            f"(min {MIN_REGION_SIZE}x{MIN_REGION_SIZE})"
        )
    return width, height
