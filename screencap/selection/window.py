#!/usr/bin/env python3
"""Interactive window selection.

The picker returns only the window's image, so the crop keeps the window's
size and anchors at (0, 0). The crop is fixed when the window is picked;
moving the window during the recording is not followed.
"""

from __future__ import annotations

import sys
from typing import TextIO

from screencap.selection.interactive import pick_size
from screencap.types import CaptureConfig, Region, WindowSelection

STATIONARY_WARNING = (
    "Keep the selected window still: the recording area is fixed at "
    "selection time and will not follow the window"
)


def select_window(config: CaptureConfig, out: TextIO = sys.stderr) -> WindowSelection:
    """Run the window selection flow.

    Raises:
        SelectionError: If the pick was cancelled or unusable.
    """
    if config.verbose:
        print("Click on the window you want to record (Esc cancels)...", file=out)

    width, height = pick_size(window=True)

    if config.verbose:
        print(f"Selected window: {width}x{height}", file=out)
    return WindowSelection(Region(width=width, height=height), warning=STATIONARY_WARNING)
