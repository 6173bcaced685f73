#!/usr/bin/env python3
"""Interactive monitor selection.

Flow:
    enumerate screen devices
      0 found  -> SelectionError
      1 found  -> selected without asking
      N found  -> gather metadata, show menu, read a number in [1, N]

Metadata per candidate is best effort: a thumbnail (skipped with
``no_preview``), the display resolution (1920x1080 when unknown) and an
informational bitrate / file-size estimate.
"""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from typing import Callable, List, Optional, TextIO, Tuple

from screencap import tools
from screencap.selection import preview
from screencap.types import (
    DEFAULT_MONITOR_RESOLUTION,
    ESTIMATE_BITS_PER_PIXEL,
    ESTIMATE_FRAME_RATE,
    CaptureConfig,
    MonitorSelection,
    SelectionError,
)


@dataclass(frozen=True)
class MonitorCandidate:
    """One selectable screen device with its display metadata."""

    device_id: str
    screen: int
    width: int
    height: int
    resolution_known: bool = True
    thumbnail: Optional[str] = None

    @property
    def bitrate(self) -> float:
        """Estimated bits per second at the default frame rate."""
        return estimate_bitrate(self.width, self.height)

    @property
    def megabytes_per_minute(self) -> float:
        return self.bitrate * 60 / 8 / 1_000_000


def estimate_bitrate(width: int, height: int, fps: int = ESTIMATE_FRAME_RATE) -> float:
    """Rough recording bitrate: pixels * fps * bits-per-pixel."""
    return width * height * fps * ESTIMATE_BITS_PER_PIXEL


def enumerate_monitors() -> List[Tuple[str, int]]:
    return tools.list_screen_devices()


def gather_metadata(
    devices: List[Tuple[str, int]],
    config: CaptureConfig,
    workdir: Optional[str] = None,
) -> List[MonitorCandidate]:
    """Attach resolution, estimate and (optionally) a thumbnail to each device.

    Resolutions are matched to devices by position. Thumbnails are written
    into ``workdir``, which the caller owns and removes.
    """
    resolutions = tools.display_resolutions()
    candidates: List[MonitorCandidate] = []

    for position, (device_id, screen) in enumerate(devices):
        known = position < len(resolutions)
        width, height = resolutions[position] if known else DEFAULT_MONITOR_RESOLUTION

        thumbnail = None
        if workdir is not None and not config.no_preview:
            path = os.path.join(workdir, f"screen-{device_id}.jpg")
            # screencapture numbers displays from 1
            if tools.capture_display(path, screen + 1, timeout=config.probe_timeout):
                preview.shrink(path)
                thumbnail = path

        candidates.append(
            MonitorCandidate(
                device_id=device_id,
                screen=screen,
                width=width,
                height=height,
                resolution_known=known,
                thumbnail=thumbnail,
            )
        )
    return candidates


def describe(number: int, candidate: MonitorCandidate) -> str:
    """One menu line for ``candidate``."""
    size = f"{candidate.width}x{candidate.height}"
    if not candidate.resolution_known:
        size += " (assumed)"
    return (
        f"  {number}) Screen {candidate.screen} [device {candidate.device_id}] "
        f"{size}, ~{candidate.bitrate / 1_000_000:.1f} Mbps, "
        f"~{candidate.megabytes_per_minute:.0f} MB/min"
    )


def show_menu(
    candidates: List[MonitorCandidate],
    config: CaptureConfig,
    out: TextIO = sys.stderr,
) -> None:
    renderer = None if config.no_preview else preview.find_renderer()
    print("Available screens:", file=out)
    for number, candidate in enumerate(candidates, 1):
        print(describe(number, candidate), file=out)
        if renderer and candidate.thumbnail:
            out.flush()
            preview.render(candidate.thumbnail, renderer)


def prompt_choice(
    count: int,
    input_fn: Callable[[str], str] = input,
    out: TextIO = sys.stderr,
) -> int:
    """Read a 1-based choice, re-prompting until it is valid.

    Raises:
        SelectionError: If input ends (EOF) before a valid choice.
    """
    while True:
        # Prompt on the menu stream; input() would write it to stdout.
        print(f"Select screen [1-{count}]: ", end="", file=out)
        out.flush()
        try:
            raw = input_fn("")
        except EOFError:
            raise SelectionError("Monitor selection cancelled") from None
        raw = raw.strip()
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw)
        print(f"Invalid choice {raw!r}: enter a number from 1 to {count}", file=out)


def select_monitor(
    config: CaptureConfig,
    input_fn: Callable[[str], str] = input,
    out: TextIO = sys.stderr,
) -> MonitorSelection:
    """Run the monitor selection flow and return the chosen device."""
    devices = enumerate_monitors()
    if not devices:
        raise SelectionError("No screen capture devices found")

    if len(devices) == 1:
        device_id, screen = devices[0]
        if config.verbose:
            print(f"Only one screen found, using screen {screen} (device {device_id})",
                  file=out)
        return MonitorSelection(device_id=device_id)

    with tempfile.TemporaryDirectory(prefix="screencap-thumbs-") as workdir:
        candidates = gather_metadata(devices, config, workdir)
        show_menu(candidates, config, out)
        choice = prompt_choice(len(candidates), input_fn, out)

    return MonitorSelection(device_id=candidates[choice - 1].device_id)
