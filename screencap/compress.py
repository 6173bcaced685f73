#!/usr/bin/env python3
"""compress-video - re-encode a recording with x264 to shrink it.

Quality guide:
  CRF 18: high quality, larger file
  CRF 23: default, good quality/size balance
  CRF 28: lower quality, smaller file
"""

from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from screencap.types import (
    DEFAULT_AUDIO_BITRATE,
    DEFAULT_AUDIO_CODEC,
    DEFAULT_CRF,
    DEFAULT_PRESET,
    MAX_CRF,
    MIN_CRF,
    X264_PRESETS,
    __version__,
)


def validate_crf(value: str) -> int:
    """Parse a CRF value and check it is within 0-51."""
    try:
        crf = int(value)
    except ValueError:
        raise ValueError(f"CRF must be a number between {MIN_CRF} and {MAX_CRF}") from None
    if crf < MIN_CRF or crf > MAX_CRF:
        raise ValueError(f"CRF must be a number between {MIN_CRF} and {MAX_CRF}")
    return crf


def validate_preset(preset: str) -> str:
    if preset not in X264_PRESETS:
        raise ValueError(
            f"Invalid preset '{preset}'. Valid presets: {' '.join(X264_PRESETS)}"
        )
    return preset


def default_output(input_path: str) -> str:
    """``clip.mov`` -> ``clip_compressed.mp4`` next to the input."""
    path = Path(input_path)
    return str(path.with_name(f"{path.stem}_compressed.mp4"))


def probe_media(path: str) -> Tuple[float, int]:
    """(duration seconds, size bytes) via ffprobe; zeros when unknown."""
    try:
        result = subprocess.run(
            [
                "ffprobe", "-v", "error",
                "-show_entries", "format=duration,size",
                "-of", "default=noprint_wrappers=1:nokey=1",
                path,
            ],
            capture_output=True, text=True, check=True,
        )
        lines = result.stdout.split()
        return float(lines[0]), int(lines[1])
    except (subprocess.CalledProcessError, FileNotFoundError, ValueError, IndexError):
        return 0.0, 0


def build_compress_command(input_path: str, output: str, crf: int, preset: str) -> List[str]:
    return [
        "ffmpeg", "-hide_banner",
        "-i", input_path,
        "-c:v", "libx264",
        "-crf", str(crf),
        "-preset", preset,
        "-pix_fmt", "yuv420p",
        "-c:a", DEFAULT_AUDIO_CODEC,
        "-b:a", DEFAULT_AUDIO_BITRATE,
        "-movflags", "+faststart",
        "-y",
        output,
    ]


def reduction_percent(input_size: int, output_size: int) -> int:
    if input_size <= 0:
        return 0
    return 100 - (output_size * 100 // input_size)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="compress-video",
        description="Compress videos using the x264 codec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  compress-video -i video.mp4
  compress-video -i video.mp4 -o compressed.mp4 -q 28
  compress-video -i video.mp4 -q 18 -p slow
""",
    )
    parser.add_argument("-i", "--input", required=True, help="Input video file")
    parser.add_argument("-o", "--output",
                        help="Output file (default: <input>_compressed.mp4)")
    parser.add_argument("-q", "--crf", default=str(DEFAULT_CRF),
                        help=f"Quality CRF {MIN_CRF}-{MAX_CRF}, lower is better (default: {DEFAULT_CRF})")
    parser.add_argument("-p", "--preset", default=DEFAULT_PRESET,
                        help=f"x264 preset: ultrafast..veryslow (default: {DEFAULT_PRESET})")
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    if not os.path.isfile(args.input):
        print(f"Error: Input file '{args.input}' not found", file=sys.stderr)
        return 1

    try:
        crf = validate_crf(args.crf)
        preset = validate_preset(args.preset)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not shutil.which("ffmpeg"):
        print("Error: ffmpeg is not installed", file=sys.stderr)
        return 1

    output = args.output or default_output(args.input)
    duration, input_size = probe_media(args.input)
    if not input_size:
        input_size = os.path.getsize(args.input)

    print(f"Input: {args.input}")
    print(f"  Size: {input_size // 1048576} MB")
    print(f"  Duration: {int(duration)} seconds")
    print(f"Compressing with x264 (crf={crf}, preset={preset}) -> {output}")

    returncode = subprocess.run(build_compress_command(args.input, output, crf, preset)).returncode
    if returncode != 0 or not os.path.exists(output):
        print("Error: Compression failed", file=sys.stderr)
        return returncode or 1

    output_size = os.path.getsize(output)
    print("Compression complete!")
    print(f"  Output: {output}")
    print(f"  Size: {output_size // 1048576} MB "
          f"({reduction_percent(input_size, output_size)}% reduction)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
