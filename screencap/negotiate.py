#!/usr/bin/env python3
"""Resolve requested resolution and frame rate against a mode catalog.

Negotiation never fails: an unavailable request falls back to something the
device offers, and every fallback is reported in ``Negotiation.warnings``.

Resolution rules:
    1. ``auto`` picks the largest (width, height) in the catalog.
    2. A request present in the catalog is used verbatim.
    3. Anything else warns and behaves like ``auto``.

Frame-rate rules (over the rates offered at the resolved resolution):
    1. ``auto`` prefers the configured rate (30) if offered, else the maximum.
    2. A request matching an offered rate is honored.
    3. Anything else warns and takes the first offered rate, in catalog order.

Two rates match when they differ by less than FRAME_RATE_TOLERANCE, since
devices report values such as ``30.000030``. The resolved rate is always the
device's own value, so ffmpeg receives a rate the device accepts.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from screencap.types import AUTO, FRAME_RATE_TOLERANCE, CaptureConfig, VideoMode

Size = Tuple[int, int]


@dataclass(frozen=True)
class Negotiation:
    """Outcome of negotiating one request against one catalog."""

    width: int
    height: int
    frame_rate: float
    warnings: Tuple[str, ...] = ()

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def fallback(self) -> bool:
        return bool(self.warnings)

    @property
    def mode(self) -> VideoMode:
        return VideoMode(self.width, self.height, self.frame_rate)


def parse_resolution(text: str) -> Size:
    """Parse ``WxH`` into (width, height).

    Raises:
        ValueError: If the text is not two positive integers joined by 'x'.
    """
    parts = text.strip().lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"Invalid resolution: {text!r} (expected WxH)")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid resolution: {text!r} (expected WxH)") from None
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid resolution: {text!r} (must be positive)")
    return width, height


def largest_resolution(modes: Iterable[VideoMode]) -> Size:
    """Largest width, tie-broken by largest height."""
    return max((m.width, m.height) for m in modes)


def same_rate(a: float, b: float) -> bool:
    return abs(a - b) < FRAME_RATE_TOLERANCE


def find_rate(wanted: float, rates: Iterable[float]) -> Optional[float]:
    """The offered rate matching ``wanted``, or None."""
    for rate in rates:
        if same_rate(rate, wanted):
            return rate
    return None


def available_rates(modes: Iterable[VideoMode], size: Size) -> List[float]:
    """Rates offered at ``size``, de-duplicated in catalog order."""
    rates: List[float] = []
    for mode in modes:
        if (mode.width, mode.height) != size:
            continue
        if find_rate(mode.frame_rate, rates) is None:
            rates.append(mode.frame_rate)
    return rates


def resolve_resolution(
    requested: str, modes: Sequence[VideoMode]
) -> Tuple[Size, Optional[str]]:
    """Pick a resolution from ``modes``; returns (size, warning or None)."""
    if requested.strip().lower() == AUTO:
        return largest_resolution(modes), None

    try:
        size: Optional[Size] = parse_resolution(requested)
    except ValueError:
        size = None

    offered = {(m.width, m.height) for m in modes}
    if size is not None and size in offered:
        return size, None

    chosen = largest_resolution(modes)
    return chosen, (
        f"{requested} not offered, falling back to {chosen[0]}x{chosen[1]}"
    )


def resolve_frame_rate(
    requested: str, rates: Sequence[float], preferred: float
) -> Tuple[float, Optional[str]]:
    """Pick a frame rate from ``rates``; returns (rate, warning or None)."""
    if requested.strip().lower() == AUTO:
        match = find_rate(preferred, rates)
        if match is not None:
            return match, None
        return max(rates), None

    try:
        wanted = float(requested)
    except ValueError:
        wanted = math.nan

    match = find_rate(wanted, rates) if math.isfinite(wanted) else None
    if match is not None:
        return match, None

    chosen = rates[0]
    return chosen, f"Requested fps {requested} not available, using {chosen:g}"


def resolve(
    requested_resolution: str,
    requested_frame_rate: str,
    modes: Sequence[VideoMode],
    config: CaptureConfig,
) -> Negotiation:
    """Negotiate a (resolution, frame rate) pair.

    Args:
        requested_resolution: ``WxH`` or ``auto``.
        requested_frame_rate: A number or ``auto``.
        modes: The device's catalog (a ModeCatalog or any sequence of modes).
        config: Supplies the preferred rate and the synthetic fallback mode.

    Returns:
        A Negotiation whose mode is always drawn from ``modes`` (or the
        fallback mode when ``modes`` is empty).
    """
    warnings: List[str] = []
    offered = list(modes)
    if not offered:
        offered = [config.fallback_mode]
        warnings.append(
            f"No modes available, assuming {config.fallback_mode.resolution}"
        )

    size, warning = resolve_resolution(requested_resolution, offered)
    if warning:
        warnings.append(warning)

    rate, warning = resolve_frame_rate(
        requested_frame_rate,
        available_rates(offered, size),
        config.preferred_frame_rate,
    )
    if warning:
        warnings.append(warning)

    return Negotiation(
        width=size[0], height=size[1], frame_rate=rate, warnings=tuple(warnings)
    )
