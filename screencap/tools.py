#!/usr/bin/env python3
"""Narrow wrappers around the external tools screencap depends on.

Each wrapper runs one platform tool and returns structured data (a list of
devices, a list of modes, a rectangle, a success flag). Text parsing of
diagnostic output lives here and nowhere else, so negotiation and selection
logic never see raw tool output.

Tools:
    ffmpeg (avfoundation)   device listing and per-device mode listing
    screencapture           thumbnails, permission trials, interactive picks
    system_profiler         display resolutions
    pynput                  current pointer position
    Pillow                  pixel size of captured images
"""

from __future__ import annotations

import re
import subprocess
from typing import List, Optional, Tuple

from PIL import Image

from screencap.tasks import run_cancellable
from screencap.types import VideoMode

SCREEN_DEVICE_PATTERN = re.compile(r"\[(\d+)\]\s+Capture screen\s+(\d+)")
MODE_PATTERN = re.compile(r"(\d+)x(\d+)\s+(\d+(?:\.\d+)?)\s*fps")
DISPLAY_RESOLUTION_PATTERN = re.compile(r"Resolution:\s*(\d+)\s*x\s*(\d+)")


# ============================================================================
# FFMPEG / AVFOUNDATION
# ============================================================================


def _ffmpeg_diagnostics(args: List[str]) -> str:
    """Run an ffmpeg listing command and return its combined output.

    Listing commands always "fail" because no input is opened, so the exit
    status is ignored; the information is in the diagnostic text.
    """
    try:
        result = subprocess.run(
            ["ffmpeg", "-hide_banner", "-f", "avfoundation", *args, "-i", ""],
            capture_output=True, text=True,
        )
    except FileNotFoundError:
        return ""
    return (result.stderr or "") + (result.stdout or "")


def parse_screen_devices(text: str) -> List[Tuple[str, int]]:
    """Extract (device index, screen number) pairs from a device listing."""
    devices: List[Tuple[str, int]] = []
    seen = set()
    for match in SCREEN_DEVICE_PATTERN.finditer(text):
        index = match.group(1)
        if index in seen:
            continue
        seen.add(index)
        devices.append((index, int(match.group(2))))
    return devices


def list_screen_devices() -> List[Tuple[str, int]]:
    """List screen-capture devices as (device index, screen number) pairs."""
    return parse_screen_devices(_ffmpeg_diagnostics(["-list_devices", "true"]))


def parse_mode_lines(text: str) -> List[VideoMode]:
    """Extract ``<W>x<H> <fps> fps`` entries, in the order they appear."""
    modes: List[VideoMode] = []
    for match in MODE_PATTERN.finditer(text):
        width, height, rate = int(match.group(1)), int(match.group(2)), float(match.group(3))
        if width <= 0 or height <= 0 or rate <= 0:
            continue
        modes.append(VideoMode(width, height, rate))
    return modes


def query_device_modes(device: str) -> List[VideoMode]:
    """Ask avfoundation which modes a (camera) device supports."""
    return parse_mode_lines(
        _ffmpeg_diagnostics(["-list_options", "true", "-video_device_index", device])
    )


# ============================================================================
# DISPLAY METADATA
# ============================================================================


def parse_display_resolutions(text: str) -> List[Tuple[int, int]]:
    """Extract ``Resolution: W x H`` entries in display order."""
    return [
        (int(m.group(1)), int(m.group(2)))
        for m in DISPLAY_RESOLUTION_PATTERN.finditer(text)
    ]


def display_resolutions() -> List[Tuple[int, int]]:
    """Resolutions of attached displays, best effort.

    Uses ``system_profiler SPDisplaysDataType``; if that is unavailable,
    falls back to the monitor list reported by mss. Returns an empty list
    when neither source answers.
    """
    try:
        result = subprocess.run(
            ["system_profiler", "SPDisplaysDataType"],
            capture_output=True, text=True, check=True,
        )
        resolutions = parse_display_resolutions(result.stdout)
        if resolutions:
            return resolutions
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    try:
        from mss import mss
        from mss.exception import ScreenShotError
    except ImportError:
        return []
    try:
        with mss() as sct:
            return [(m["width"], m["height"]) for m in sct.monitors[1:]]
    except ScreenShotError:
        return []


# ============================================================================
# SCREENCAPTURE
# ============================================================================


def has_output(path: str) -> bool:
    """True if ``path`` exists and is non-empty."""
    try:
        with open(path, "rb") as f:
            return bool(f.read(1))
    except OSError:
        return False


def capture_display(path: str, display: int, timeout: Optional[float] = None) -> bool:
    """Silently capture display ``display`` (1-based) to ``path`` as JPEG."""
    try:
        result = run_cancellable(
            ["screencapture", "-x", "-D", str(display), "-t", "jpg", path],
            timeout=timeout,
        )
    except FileNotFoundError:
        return False
    return result.ok and has_output(path)


def capture_interactive(path: str, window: bool = False) -> bool:
    """Let the user pick an area (or a window) and save it to ``path``.

    Returns False when the user cancels (the tool exits non-zero or writes
    nothing) or the tool is missing.
    """
    if window:
        cmd = ["screencapture", "-i", "-W", "-o", "-x", path]
    else:
        cmd = ["screencapture", "-i", "-s", "-x", path]
    try:
        result = run_cancellable(cmd)
    except FileNotFoundError:
        return False
    return result.returncode == 0 and has_output(path)


# ============================================================================
# POINTER AND IMAGES
# ============================================================================


def pointer_position() -> Optional[Tuple[int, int]]:
    """Current pointer position, or None when it cannot be read."""
    try:
        from pynput import mouse
        x, y = mouse.Controller().position
    except (ImportError, OSError, RuntimeError, TypeError):
        return None
    return int(x), int(y)


def image_size(path: str) -> Optional[Tuple[int, int]]:
    """Pixel (width, height) of an image file, or None if unreadable."""
    try:
        with Image.open(path) as img:
            return img.size
    except OSError:
        return None
