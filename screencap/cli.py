#!/usr/bin/env python3
"""screencap - configure and launch avfoundation screen recordings.

Resolves the capture target (a screen device, a picked monitor, a dragged
area or a clicked window), negotiates resolution and frame rate against what
the device offers, and hands one fully specified job to ffmpeg.

Environment:
    SKIP_DEPS_CHECK=1   skip dependency checking for faster startup
    NO_PREVIEW=1        skip thumbnail previews in the monitor menu
"""

from __future__ import annotations

import argparse
import math
import os
import re
import shlex
import sys
import time
from typing import List, Mapping, Optional, Tuple

from screencap import catalog, deps, negotiate, tools
from screencap.assemble import assemble, build_command, fit_region, run_encoder, summary
from screencap.compress import validate_crf
from screencap.selection import get_selector
from screencap.types import (
    AUTO,
    DEFAULT_CODEC,
    DEFAULT_CRF,
    DEFAULT_PRESET,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_SCREEN_THRESHOLD,
    NO_AUDIO,
    AreaSelection,
    CaptureConfig,
    CaptureDevice,
    CaptureError,
    EncodingParams,
    MonitorSelection,
    Region,
    SelectionResult,
    WindowSelection,
    __version__,
)


DURATION_PATTERN = re.compile(
    r'(?:(\d+(?:\.\d+)?)\s*h)?\s*(?:(\d+(?:\.\d+)?)\s*m)?\s*(?:(\d+(?:\.\d+)?)\s*s)?'
)


def parse_duration(s: str) -> float:
    """Parse duration string (e.g., '30', '1m30s', '90s', '1h')."""
    s = s.strip().lower()

    try:
        seconds = float(s)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"Invalid duration format: {s}")
        return seconds

    # Units must appear in h, m, s order and cover the whole string,
    # so '1m30' is rejected rather than read as one minute.
    match = DURATION_PATTERN.fullmatch(s)
    if match:
        hours, minutes, secs = (float(g) if g else 0.0 for g in match.groups())
        total = hours * 3600 + minutes * 60 + secs
        if total > 0:
            return total

    raise ValueError(f"Invalid duration format: {s}")


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    """True for 1/true/yes/on (case-insensitive)."""
    return environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def default_output() -> str:
    return time.strftime("capture_%Y%m%d_%H%M%S.mp4")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screencap",
        description="Resilient avfoundation screen recorder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Capture target (pick at most one):
  --monitor          Choose a screen from a menu (with previews)
  --area             Drag a rectangle to record
  --window           Click a window to record

Environment:
  SKIP_DEPS_CHECK=1  Skip dependency checking for faster startup
  NO_PREVIEW=1       Skip thumbnail previews in the monitor menu

Examples:
  screencap --duration 10s -o demo.mp4
  screencap -r 1920x1080 -f 30 -q 20
  screencap --area --duration 1m
  SKIP_DEPS_CHECK=1 screencap --duration 5s
""",
    )

    parser.add_argument("-o", "--output", default=None,
                        help="Output file (default: capture_YYYYMMDD_HHMMSS.mp4)")
    parser.add_argument("-d", "--device", default=str(DEFAULT_SCREEN_THRESHOLD),
                        help=f"Video device index or name (default: {DEFAULT_SCREEN_THRESHOLD})")
    parser.add_argument("-a", "--audio", default=NO_AUDIO, metavar="DEV",
                        help="Audio device index or 'none' (default: none)")
    parser.add_argument("-r", "--resolution", default=AUTO, metavar="WxH",
                        help="Resolution or 'auto' (default: auto)")
    parser.add_argument("-f", "--fps", default=AUTO, metavar="N",
                        help="Frame rate or 'auto' (default: auto)")
    parser.add_argument("-q", "--quality", default=None,
                        help=f"CRF 0-51 for {DEFAULT_CODEC} (default: {DEFAULT_CRF}), "
                             "or quality value for other codecs")
    parser.add_argument("-c", "--codec", default=DEFAULT_CODEC,
                        help=f"Video codec (default: {DEFAULT_CODEC})")
    parser.add_argument("-p", "--preset", default=DEFAULT_PRESET,
                        help=f"x264 preset: ultrafast..veryslow (default: {DEFAULT_PRESET})")
    parser.add_argument("-s", "--sck", action="store_true",
                        help="Use ScreenCaptureKit (experimental)")
    parser.add_argument("--duration", default=None, metavar="TIME",
                        help="Record for TIME: 30, 30s, 1m, 1h (default: until Ctrl+C)")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--monitor", dest="select", action="store_const", const="monitor",
                      help="Choose the screen to record from a menu")
    mode.add_argument("--area", dest="select", action="store_const", const="area",
                      help="Drag a rectangle to select the area to record")
    mode.add_argument("--window", dest="select", action="store_const", const="window",
                      help="Click a window to select it")

    parser.add_argument("--no-preview", action="store_true",
                        help="Skip thumbnail previews in the monitor menu")
    parser.add_argument("--screen-threshold", type=int, default=DEFAULT_SCREEN_THRESHOLD,
                        metavar="N",
                        help="Device indices >= N are screens "
                             f"(default: {DEFAULT_SCREEN_THRESHOLD})")
    parser.add_argument("--probe-timeout", type=float, default=DEFAULT_PROBE_TIMEOUT,
                        metavar="SEC",
                        help="Permission probe time budget "
                             f"(default: {DEFAULT_PROBE_TIMEOUT:g})")
    parser.add_argument("--list-devices", action="store_true",
                        help="List screen capture devices and exit")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the ffmpeg command instead of running it")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show progress")
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace, environ: Mapping[str, str]) -> CaptureConfig:
    """The one configuration value shared by every component of this run."""
    if args.probe_timeout <= 0:
        raise ValueError("--probe-timeout must be positive")
    return CaptureConfig(
        screen_threshold=args.screen_threshold,
        probe_timeout=args.probe_timeout,
        no_preview=args.no_preview or env_flag(environ, "NO_PREVIEW"),
        skip_deps_check=env_flag(environ, "SKIP_DEPS_CHECK"),
        verbose=args.verbose,
    )


def build_params(args: argparse.Namespace) -> EncodingParams:
    """Encoding parameters from the command line.

    Raises:
        ValueError: On an invalid duration or CRF.
    """
    duration = None
    if args.duration is not None:
        duration = parse_duration(args.duration)
        if duration <= 0:
            raise ValueError("Duration must be positive")

    crf, quality = DEFAULT_CRF, None
    if args.quality is not None:
        if args.codec == DEFAULT_CODEC:
            crf = validate_crf(args.quality)
        else:
            quality = args.quality

    return EncodingParams(
        output=args.output or default_output(),
        codec=args.codec,
        crf=crf,
        preset=args.preset,
        quality=quality,
        duration=duration,
        audio_device=args.audio,
        use_sck=args.sck,
    )


def resolve_target(
    selection: Optional[SelectionResult], device: str
) -> Tuple[str, Optional[Region]]:
    """Device identifier and crop region implied by a selection."""
    if isinstance(selection, MonitorSelection):
        return selection.device_id, None
    if isinstance(selection, (AreaSelection, WindowSelection)):
        return device, selection.region
    return device, None


def native_resolution(device: CaptureDevice, config: CaptureConfig) -> Optional[Tuple[int, int]]:
    """Best-effort physical size of the screen behind ``device``."""
    if not device.is_screen:
        return None
    position = int(device.identifier) - config.screen_threshold
    resolutions = tools.display_resolutions()
    if 0 <= position < len(resolutions):
        return resolutions[position]
    return None


def warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def list_devices() -> int:
    devices = tools.list_screen_devices()
    if not devices:
        print("No screen capture devices found")
        return 1
    print(f"Found {len(devices)} screen device(s):")
    for index, screen in devices:
        print(f"  [{index}] Capture screen {screen}")
    return 0


def main(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    environ = os.environ if environ is None else environ

    try:
        config = build_config(args, environ)
        params = build_params(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if not config.skip_deps_check:
            deps.check_dependencies(verbose=config.verbose)

        if args.list_devices:
            return list_devices()

        selection = get_selector(args.select)(config) if args.select else None
    except CaptureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled", file=sys.stderr)
        return 130

    if isinstance(selection, WindowSelection) and selection.warning:
        warn(selection.warning)

    device_id, region = resolve_target(selection, args.device)
    device = CaptureDevice.classify(device_id, config.screen_threshold)

    modes = catalog.list_modes(device, config, native_resolution(device, config))
    if modes.warning:
        warn(modes.warning)

    negotiation = negotiate.resolve(args.resolution, args.fps, modes, config)
    for message in negotiation.warnings:
        warn(message)

    if region is not None:
        region, message = fit_region(region, negotiation.mode)
        if message:
            warn(message)

    job = assemble(device, region, negotiation.mode, params, config)
    cmd = build_command(job, config)

    for line in summary(job):
        print(line, file=sys.stderr)

    if args.dry_run:
        print(shlex.join(cmd))
        return 0

    if config.verbose:
        print(f"Running: {shlex.join(cmd)}", file=sys.stderr)

    returncode = run_encoder(cmd)
    if returncode != 0:
        print(f"Error: Encoder exited with status {returncode}", file=sys.stderr)
    return returncode


if __name__ == "__main__":
    sys.exit(main())
