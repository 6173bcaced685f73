#!/usr/bin/env python3
"""Thumbnail previews for the monitor menu.

Thumbnails are shrunk with Pillow and drawn in the terminal by the first
installed renderer (imgcat, then viu). With no renderer installed the menu
simply shows text.
"""

from __future__ import annotations

import shutil
import subprocess
from typing import List, Optional, Tuple

from PIL import Image

from screencap.types import THUMBNAIL_MAX_SIZE

# Tried in order; each entry is (executable, extra arguments).
RENDERERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("imgcat", ()),
    ("viu", ("-w", "60")),
)


def find_renderer() -> Optional[List[str]]:
    """Command prefix of the first installed renderer, or None."""
    for name, args in RENDERERS:
        if shutil.which(name):
            return [name, *args]
    return None


def shrink(path: str, max_size: Tuple[int, int] = THUMBNAIL_MAX_SIZE) -> bool:
    """Downscale the image at ``path`` in place. Returns False on failure."""
    try:
        with Image.open(path) as img:
            img.thumbnail(max_size)
            img.convert("RGB").save(path, format="JPEG")
    except OSError:
        return False
    return True


def render(path: str, renderer: Optional[List[str]] = None) -> bool:
    """Draw the image in the terminal. Returns False if nothing was drawn."""
    cmd = renderer or find_renderer()
    if cmd is None:
        return False
    try:
        subprocess.run([*cmd, path], check=True)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False
    return True
