"""Shared pytest fixtures for screencap tests."""

import struct
import sys
import zlib
from pathlib import Path
from typing import Callable

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from screencap.types import CaptureConfig, VideoMode  # noqa: E402


def png_bytes(width: int, height: int) -> bytes:
    """Encode a black RGB PNG of the given size."""
    signature = b"\x89PNG\r\n\x1a\n"

    def chunk(kind: bytes, data: bytes) -> bytes:
        return (
            struct.pack(">I", len(data))
            + kind
            + data
            + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)
        )

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    # one filter byte per row, then RGB pixels
    raw = (b"\x00" + b"\x00\x00\x00" * width) * height
    return (
        signature
        + chunk(b"IHDR", ihdr)
        + chunk(b"IDAT", zlib.compress(raw))
        + chunk(b"IEND", b"")
    )


@pytest.fixture
def config() -> CaptureConfig:
    """Default configuration with a short probe budget for fast tests."""
    return CaptureConfig(probe_timeout=0.5, poll_interval=0.05)


@pytest.fixture
def write_png() -> Callable[[str, int, int], None]:
    """Return a function that writes a PNG of a given size to a path."""

    def _write(path: str, width: int, height: int) -> None:
        Path(path).write_bytes(png_bytes(width, height))

    return _write


@pytest.fixture
def sample_catalog() -> list:
    """Catalog used by the negotiation scenarios."""
    return [
        VideoMode(1920, 1080, 30.0),
        VideoMode(1920, 1080, 60.0),
        VideoMode(1280, 720, 30.0),
    ]


@pytest.fixture
def device_listing() -> str:
    """ffmpeg -list_devices output with two cameras and two screens."""
    return (
        "[AVFoundation indev @ 0x7f8] AVFoundation video devices:\n"
        "[AVFoundation indev @ 0x7f8] [0] FaceTime HD Camera\n"
        "[AVFoundation indev @ 0x7f8] [1] OBS Virtual Camera\n"
        "[AVFoundation indev @ 0x7f8] [4] Capture screen 0\n"
        "[AVFoundation indev @ 0x7f8] [5] Capture screen 1\n"
        "[AVFoundation indev @ 0x7f8] AVFoundation audio devices:\n"
        "[AVFoundation indev @ 0x7f8] [0] MacBook Pro Microphone\n"
        ": Input/output error\n"
    )


@pytest.fixture
def mode_listing() -> str:
    """ffmpeg -list_options output for a camera."""
    return (
        "[avfoundation @ 0x7f9] Supported modes:\n"
        "[avfoundation @ 0x7f9]   1280x720 30.000030 fps\n"
        "[avfoundation @ 0x7f9]   1280x720 15.000000 fps\n"
        "[avfoundation @ 0x7f9]   640x480 30.000030 fps\n"
        "[avfoundation @ 0x7f9]   1920x1080 29.970000 fps\n"
    )


@pytest.fixture
def display_info() -> str:
    """system_profiler SPDisplaysDataType output with two displays."""
    return (
        "Graphics/Displays:\n\n"
        "    Apple M1 Pro:\n\n"
        "      Displays:\n"
        "        Color LCD:\n"
        "          Display Type: Built-in Liquid Retina XDR Display\n"
        "          Resolution: 3024 x 1964 Retina\n"
        "        DELL U2720Q:\n"
        "          Resolution: 3840 x 2160 (2160p/4K UHD 1 - Ultra High Definition)\n"
    )
