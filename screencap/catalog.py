#!/usr/bin/env python3
"""Device mode catalog: which resolution/frame-rate pairs a device offers.

Screen devices (index at or above the configured threshold) cannot be
enumerated by avfoundation, so they get a fixed reference table built from
the native screen size and common sizes. Camera devices are queried live.
When the query yields nothing, a single synthetic mode is substituted and
the returned catalog is marked as a fallback.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from screencap import tools
from screencap.types import CaptureConfig, CaptureDevice, ModeCatalog, VideoMode


def screen_reference_modes(
    config: CaptureConfig, native: Optional[Tuple[int, int]] = None
) -> List[VideoMode]:
    """Reference table for screen devices, native size first."""
    sizes = [native or config.native_resolution]
    for size in config.extra_resolutions:
        if size not in sizes:
            sizes.append(size)

    return [
        VideoMode(width, height, rate)
        for width, height in sizes
        for rate in config.reference_frame_rates
    ]


def list_modes(
    device: CaptureDevice,
    config: CaptureConfig,
    native: Optional[Tuple[int, int]] = None,
) -> ModeCatalog:
    """Produce the mode catalog for ``device``.

    Args:
        device: Device to describe.
        config: Supplies the screen reference table and the fallback mode.
        native: Detected size of the screen, used in place of
            config.native_resolution for screen devices.

    Returns:
        A ModeCatalog. ``fallback`` is set (with a warning) when the device
        query returned no parsable modes.
    """
    if device.is_screen:
        return ModeCatalog(modes=tuple(screen_reference_modes(config, native)))

    modes = tools.query_device_modes(device.identifier)
    if modes:
        return ModeCatalog(modes=tuple(modes))

    fallback = config.fallback_mode
    return ModeCatalog(
        modes=(fallback,),
        fallback=True,
        warning=(
            f"ffmpeg did not list modes for device {device.identifier}; "
            f"assuming {fallback.resolution} @ {fallback.frame_rate:g}"
        ),
    )
