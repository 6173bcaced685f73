#!/usr/bin/env python3
"""Shared types, constants, and exceptions for the screencap package.

This module holds the data model every other module passes around:
capture devices, video modes, crop regions, selection results and the
final capture-job descriptor. Centralizing these keeps the catalog,
negotiator, selection flows and assembler loosely coupled: they only
exchange values defined here.

Type Definitions:
    CaptureDevice: Device identifier plus screen/camera classification
    VideoMode: A (width, height, frame rate) triple offered by a device
    ModeCatalog: The modes of one device, with a fallback marker
    Region: Crop rectangle in pixels
    SelectionResult: MonitorSelection | AreaSelection | WindowSelection
    CaptureJobDescriptor: Immutable job handed to the encoder
    CaptureConfig: Immutable configuration built once from CLI input

Exceptions:
    CaptureError and its subclasses (see ERROR TAXONOMY below)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

# ============================================================================
# VERSION AND METADATA
# ============================================================================

__version__ = "1.0.0"

# ============================================================================
# DEVICE CLASSIFICATION
# ============================================================================

SCREEN_DEVICE = "screen"
CAMERA_DEVICE = "camera"

# avfoundation lists cameras first, then "Capture screen N" entries.
DEFAULT_SCREEN_THRESHOLD: int = 4

# ============================================================================
# ENCODING DEFAULTS
# ============================================================================

AUTO = "auto"
NO_AUDIO = "none"

DEFAULT_CODEC: str = "libx264"
DEFAULT_CRF: int = 23  # 0-51, lower = better quality
DEFAULT_PRESET: str = "medium"
DEFAULT_AUDIO_CODEC: str = "aac"
DEFAULT_AUDIO_BITRATE: str = "128k"
DEFAULT_THREAD_QUEUE_SIZE: int = 4096

X264_PRESETS: Tuple[str, ...] = (
    "ultrafast",
    "superfast",
    "veryfast",
    "faster",
    "fast",
    "medium",
    "slow",
    "slower",
    "veryslow",
)

MIN_CRF: int = 0
MAX_CRF: int = 51

# ============================================================================
# MODE NEGOTIATION DEFAULTS
# ============================================================================

DEFAULT_NATIVE_RESOLUTION: Tuple[int, int] = (3420, 2224)
REFERENCE_RESOLUTIONS: Tuple[Tuple[int, int], ...] = ((1920, 1080), (1280, 720))
REFERENCE_FRAME_RATES: Tuple[float, ...] = (60.0, 30.0)
PREFERRED_FRAME_RATE: int = 30
# Rates closer than this are the same rate (devices report 30.000030 for 30).
FRAME_RATE_TOLERANCE: float = 0.01

# Widths above this produce large files; the CLI suggests a smaller size.
HIGH_RESOLUTION_WIDTH: int = 2560

# ============================================================================
# PERMISSION PROBE TIMING
# ============================================================================

DEFAULT_PROBE_TIMEOUT: float = 2.0
DEFAULT_POLL_INTERVAL: float = 0.1

# ============================================================================
# MONITOR METADATA
# ============================================================================

DEFAULT_MONITOR_RESOLUTION: Tuple[int, int] = (1920, 1080)
# Rough bits per pixel per frame for a screen recording at CRF 23.
ESTIMATE_BITS_PER_PIXEL: float = 0.1
ESTIMATE_FRAME_RATE: int = 30
THUMBNAIL_MAX_SIZE: Tuple[int, int] = (480, 270)

# Smaller interactive selections are treated as accidental clicks.
MIN_REGION_SIZE: int = 10

SCREEN_RECORDING_HELP = (
    "Screen Recording permission is required.\n"
    "  1. Open System Settings > Privacy & Security > Screen Recording\n"
    "  2. Enable access for your terminal application\n"
    "  3. Restart the terminal and run this command again"
)

# ============================================================================
# ERROR TAXONOMY
# ============================================================================


class CaptureError(RuntimeError):
    """Base class for fatal capture errors."""


class PermissionDeniedError(CaptureError):
    """Screen-capture authorization is missing."""

    def __init__(self, message: str = "Screen Recording permission denied") -> None:
        super().__init__(f"{message}\n{SCREEN_RECORDING_HELP}")


class SelectionError(CaptureError):
    """An interactive selection was cancelled or failed."""


class MissingDependencyError(CaptureError):
    """A required external program is not installed."""


# ============================================================================
# DATA MODEL
# ============================================================================


@dataclass(frozen=True)
class CaptureDevice:
    """A capture device identified by its avfoundation index or name."""

    identifier: str
    kind: str = CAMERA_DEVICE

    @classmethod
    def classify(cls, identifier: Union[int, str], threshold: int) -> "CaptureDevice":
        """Classify a device as screen or camera by its index.

        Non-numeric identifiers (device names) are always cameras.
        """
        ident = str(identifier).strip()
        kind = CAMERA_DEVICE
        if ident.isdigit() and int(ident) >= threshold:
            kind = SCREEN_DEVICE
        return cls(identifier=ident, kind=kind)

    @property
    def is_screen(self) -> bool:
        return self.kind == SCREEN_DEVICE


@dataclass(frozen=True)
class VideoMode:
    """One resolution/frame-rate pair offered by a device."""

    width: int
    height: int
    frame_rate: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid mode size: {self.width}x{self.height}")
        if self.frame_rate <= 0:
            raise ValueError(f"Invalid frame rate: {self.frame_rate}")

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


FALLBACK_MODE = VideoMode(1920, 1080, 30.0)


@dataclass(frozen=True)
class ModeCatalog:
    """Modes of a single device.

    ``fallback`` is True when the device query produced nothing and the
    synthetic FALLBACK_MODE was substituted; ``warning`` then explains why.
    """

    modes: Tuple[VideoMode, ...]
    fallback: bool = False
    warning: Optional[str] = None

    def __iter__(self) -> Iterator[VideoMode]:
        return iter(self.modes)

    def __len__(self) -> int:
        return len(self.modes)


@dataclass(frozen=True)
class Region:
    """Crop rectangle in pixels."""

    width: int
    height: int
    x: int = 0
    y: int = 0

    def __post_init__(self) -> None:
        if min(self.width, self.height, self.x, self.y) < 0:
            raise ValueError(f"Region values must be non-negative: {self}")


@dataclass(frozen=True)
class MonitorSelection:
    device_id: str


@dataclass(frozen=True)
class AreaSelection:
    region: Region


@dataclass(frozen=True)
class WindowSelection:
    region: Region
    warning: Optional[str] = None


SelectionResult = Union[MonitorSelection, AreaSelection, WindowSelection]


@dataclass(frozen=True)
class EncodingParams:
    """Encoder settings requested by the user."""

    output: str
    codec: str = DEFAULT_CODEC
    crf: int = DEFAULT_CRF
    preset: str = DEFAULT_PRESET
    quality: Optional[str] = None
    duration: Optional[float] = None
    audio_device: str = NO_AUDIO
    use_sck: bool = False


@dataclass(frozen=True)
class CaptureJobDescriptor:
    """Complete, immutable description of one capture job."""

    device: CaptureDevice
    mode: VideoMode
    output: str
    codec: str
    codec_tag: str
    region: Optional[Region] = None
    crf: Optional[int] = None
    preset: Optional[str] = None
    quality: Optional[str] = None
    duration: Optional[float] = None
    audio_device: str = NO_AUDIO
    use_sck: bool = False


@dataclass(frozen=True)
class CaptureConfig:
    """Configuration shared by all components, built once per invocation."""

    screen_threshold: int = DEFAULT_SCREEN_THRESHOLD
    native_resolution: Tuple[int, int] = DEFAULT_NATIVE_RESOLUTION
    reference_frame_rates: Tuple[float, ...] = REFERENCE_FRAME_RATES
    preferred_frame_rate: int = PREFERRED_FRAME_RATE
    fallback_mode: VideoMode = FALLBACK_MODE
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    no_preview: bool = False
    skip_deps_check: bool = False
    verbose: bool = False
    default_codec: str = DEFAULT_CODEC
    audio_codec: str = DEFAULT_AUDIO_CODEC
    audio_bitrate: str = DEFAULT_AUDIO_BITRATE
    thread_queue_size: int = DEFAULT_THREAD_QUEUE_SIZE
    extra_resolutions: Tuple[Tuple[int, int], ...] = REFERENCE_RESOLUTIONS
