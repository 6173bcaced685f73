#!/usr/bin/env python3
"""Screen Recording permission probe with a hard time budget.

Without authorization, ``screencapture`` does not fail: it hangs. The probe
therefore runs a silent trial capture as a CancellableTask, polls for the
output file and kills the trial once the budget (2 s by default) is spent.
The trial image lives in a private temporary directory that is removed on
every path out of the probe.
"""

from __future__ import annotations

import enum
import os
import tempfile
from dataclasses import dataclass
from typing import Tuple

from screencap import tools
from screencap.tasks import run_cancellable
from screencap.types import CaptureConfig, PermissionDeniedError

# Silent full-screen trial capture; the output path is appended.
PROBE_COMMAND: Tuple[str, ...] = ("screencapture", "-x")


class Permission(enum.Enum):
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class ProbeResult:
    status: Permission
    elapsed: float
    timed_out: bool = False

    @property
    def granted(self) -> bool:
        return self.status is Permission.GRANTED


def probe(config: CaptureConfig) -> ProbeResult:
    """Check whether this process may capture the screen.

    Returns:
        GRANTED if the trial capture wrote an image before the deadline,
        DENIED if it exited without one, could not start, or was killed.
    """
    with tempfile.TemporaryDirectory(prefix="screencap-probe-") as tmp:
        path = os.path.join(tmp, "probe.png")
        try:
            result = run_cancellable(
                [*PROBE_COMMAND, path],
                timeout=config.probe_timeout,
                poll_interval=config.poll_interval,
                until=lambda: tools.has_output(path),
            )
        except FileNotFoundError:
            return ProbeResult(Permission.DENIED, elapsed=0.0)

        granted = not result.timed_out and tools.has_output(path)

    status = Permission.GRANTED if granted else Permission.DENIED
    return ProbeResult(status, elapsed=result.elapsed, timed_out=result.timed_out)


def require_permission(config: CaptureConfig) -> ProbeResult:
    """Probe and raise PermissionDeniedError unless access is granted."""
    result = probe(config)
    if not result.granted:
        reason = "timed out" if result.timed_out else "trial capture failed"
        raise PermissionDeniedError(f"Screen Recording permission denied ({reason})")
    return result
