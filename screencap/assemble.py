#!/usr/bin/env python3
"""Build the capture-job descriptor and the encoder command line for it.

``assemble`` is pure: it merges the negotiated mode, the selected target and
the encoding parameters into one frozen CaptureJobDescriptor. ``build_command``
turns a descriptor into an ffmpeg argument list, and ``run_encoder`` executes
it, returning the encoder's exit status unchanged.

Codec rules:
    default codec (libx264)   -crf N -preset P -pix_fmt yuv420p
    other codec with quality  -q:v Q
    other codec               encoder defaults
"""

from __future__ import annotations

import subprocess
from typing import List, Optional, Tuple

from screencap.types import (
    HIGH_RESOLUTION_WIDTH,
    NO_AUDIO,
    CaptureConfig,
    CaptureDevice,
    CaptureJobDescriptor,
    EncodingParams,
    Region,
    VideoMode,
)


def codec_tag(codec: str) -> str:
    """Four-character container tag for ``codec``, for player compatibility."""
    name = codec.lower()
    if "av1" in name:
        return "av01"
    if any(family in name for family in ("hevc", "h265", "x265")):
        return "hvc1"
    return "avc1"


def even_region(region: Region) -> Region:
    """Round width and height down to even numbers (yuv420p needs them)."""
    return Region(
        width=region.width - region.width % 2,
        height=region.height - region.height % 2,
        x=region.x,
        y=region.y,
    )


def fit_region(region: Region, mode: VideoMode) -> Tuple[Region, Optional[str]]:
    """Keep ``region`` inside the captured frame.

    The region is shrunk to the frame size if larger, then shifted left/up
    until it fits. Returns the region and a warning when it was changed.
    """
    width = min(region.width, mode.width)
    height = min(region.height, mode.height)
    fitted = Region(
        width=width,
        height=height,
        x=min(region.x, mode.width - width),
        y=min(region.y, mode.height - height),
    )
    if fitted == region:
        return region, None
    return fitted, (
        f"Crop {region.width}x{region.height} at ({region.x}, {region.y}) "
        f"exceeds the {mode.resolution} frame; using {fitted.width}x{fitted.height} "
        f"at ({fitted.x}, {fitted.y})"
    )


def assemble(
    device: CaptureDevice,
    region: Optional[Region],
    mode: VideoMode,
    params: EncodingParams,
    config: CaptureConfig,
) -> CaptureJobDescriptor:
    """Merge everything resolved so far into one immutable job descriptor."""
    if params.codec == config.default_codec:
        crf: Optional[int] = params.crf
        preset: Optional[str] = params.preset
        quality = None
    else:
        crf, preset = None, None
        quality = params.quality or None

    return CaptureJobDescriptor(
        device=device,
        mode=mode,
        output=params.output,
        codec=params.codec,
        codec_tag=codec_tag(params.codec),
        region=even_region(region) if region is not None else None,
        crf=crf,
        preset=preset,
        quality=quality,
        duration=params.duration,
        audio_device=params.audio_device,
        use_sck=params.use_sck,
    )


def _format_number(value: float) -> str:
    return f"{value:g}"


def _format_rate(rate: float) -> str:
    # Full precision: avfoundation rejects a rounded 29.97 or 59.94.
    return f"{rate:.10g}"


def build_command(job: CaptureJobDescriptor, config: CaptureConfig) -> List[str]:
    """ffmpeg argument list that performs ``job``."""
    cmd = [
        "ffmpeg", "-hide_banner",
        "-thread_queue_size", str(config.thread_queue_size),
        "-f", "avfoundation",
        "-framerate", _format_rate(job.mode.frame_rate),
        "-video_size", job.mode.resolution,
    ]
    if job.use_sck:
        cmd += ["-capture_screen", job.device.identifier, "-pix_fmt", "0rgb"]

    cmd += [
        "-capture_cursor", "1", "-capture_mouse_clicks", "1",
        "-i", f"{job.device.identifier}:{job.audio_device}",
    ]

    if job.duration is not None:
        cmd += ["-t", _format_number(job.duration)]

    if job.region is not None:
        r = job.region
        cmd += ["-vf", f"crop={r.width}:{r.height}:{r.x}:{r.y}"]

    cmd += ["-c:v", job.codec]
    if job.crf is not None:
        cmd += ["-crf", str(job.crf)]
    if job.preset is not None:
        cmd += ["-preset", job.preset, "-pix_fmt", "yuv420p"]
    if job.quality is not None:
        cmd += ["-q:v", job.quality]
    cmd += ["-tag:v", job.codec_tag]

    if job.audio_device != NO_AUDIO:
        cmd += ["-c:a", config.audio_codec, "-b:a", config.audio_bitrate]

    cmd += ["-movflags", "+faststart", job.output]
    return cmd


def summary(job: CaptureJobDescriptor) -> List[str]:
    """Human-readable description of ``job``, one line per entry."""
    note = " (SCK)" if job.use_sck else ""
    mode = f"{job.mode.resolution}@{_format_number(job.mode.frame_rate)}fps"
    if job.crf is not None:
        codec = f"codec {job.codec} crf={job.crf} preset={job.preset}"
    else:
        codec = f"codec {job.codec} q={job.quality or 'default'}"

    lines = [
        f"Recording device {job.device.identifier} -> {job.output}",
        f"  {mode} | {codec}{note}",
    ]
    if job.region is not None:
        r = job.region
        lines.append(f"  Crop: {r.width}x{r.height} at ({r.x}, {r.y})")
    if job.duration is not None:
        lines.append(f"  Duration: {_format_number(job.duration)}s")
    if job.mode.width > HIGH_RESOLUTION_WIDTH:
        lines.append("  Note: high resolution may result in large files (~1MB/s)")
        lines.append("  For smaller files, use: -r 1920x1080 or -r 1280x720")
    return lines


def run_encoder(cmd: List[str]) -> int:
    """Run the encoder in the foreground and return its exit status.

    Ctrl+C reaches ffmpeg too, which then finalizes the file; we wait for it
    rather than abandoning a half-written container.
    """
    proc = subprocess.Popen(cmd)
    try:
        return proc.wait()
    except KeyboardInterrupt:
        return proc.wait()
