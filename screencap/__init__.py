#!/usr/bin/env python3
"""Package initialization and public API for screencap.

screencap resolves what to record (a screen device, a monitor picked from a
menu, a dragged area or a clicked window), negotiates resolution and frame
rate against what the device offers, and assembles one immutable job for
ffmpeg's avfoundation input.

Public API:
    # Mode discovery and negotiation
    list_modes(device, config) -> ModeCatalog
    resolve(resolution, fps, catalog, config) -> Negotiation

    # Permission and selection
    probe(config) -> ProbeResult
    select_monitor(config) / select_area(config) / select_window(config)

    # Job assembly
    assemble(device, region, mode, params, config) -> CaptureJobDescriptor
    build_command(job, config) -> List[str]

Usage as a library:
    ```python
    from screencap import CaptureConfig, CaptureDevice, list_modes, resolve

    config = CaptureConfig()
    device = CaptureDevice.classify(4, config.screen_threshold)
    negotiation = resolve("auto", "auto", list_modes(device, config), config)
    print(negotiation.resolution, negotiation.frame_rate)
    ```

Usage as CLI:
    ```bash
    python -m screencap --duration 10s -o demo.mp4
    screencap --area --duration 1m
    ```
"""

from __future__ import annotations

from screencap.types import (
    __version__,
    AUTO,
    NO_AUDIO,
    FALLBACK_MODE,
    CaptureConfig,
    CaptureDevice,
    CaptureJobDescriptor,
    EncodingParams,
    ModeCatalog,
    Region,
    VideoMode,
    MonitorSelection,
    AreaSelection,
    WindowSelection,
    SelectionResult,
    CaptureError,
    PermissionDeniedError,
    SelectionError,
    MissingDependencyError,
)

from screencap.catalog import list_modes, screen_reference_modes
from screencap.negotiate import Negotiation, parse_resolution, resolve
from screencap.permissions import Permission, ProbeResult, probe, require_permission
from screencap.tasks import CancellableTask, TaskResult, run_cancellable
from screencap.selection import select_area, select_monitor, select_window
from screencap.assemble import assemble, build_command, codec_tag, run_encoder
from screencap.cli import main

__all__ = [
    # Version and constants
    "__version__",
    "AUTO",
    "NO_AUDIO",
    "FALLBACK_MODE",
    # Data model
    "CaptureConfig",
    "CaptureDevice",
    "CaptureJobDescriptor",
    "EncodingParams",
    "ModeCatalog",
    "Region",
    "VideoMode",
    "MonitorSelection",
    "AreaSelection",
    "WindowSelection",
    "SelectionResult",
    # Errors
    "CaptureError",
    "PermissionDeniedError",
    "SelectionError",
    "MissingDependencyError",
    # Catalog and negotiation
    "list_modes",
    "screen_reference_modes",
    "Negotiation",
    "parse_resolution",
    "resolve",
    # Permissions and tasks
    "Permission",
    "ProbeResult",
    "probe",
    "require_permission",
    "CancellableTask",
    "TaskResult",
    "run_cancellable",
    # Selection
    "select_area",
    "select_monitor",
    "select_window",
    # Assembly
    "assemble",
    "build_command",
    "codec_tag",
    "run_encoder",
    # CLI
    "main",
]
