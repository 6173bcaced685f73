#!/usr/bin/env python3
"""Cancellable external-process tasks with a wall-clock budget.

Some platform tools never return when something is wrong (``screencapture``
blocks forever without Screen Recording permission). Every such call goes
through CancellableTask, which starts the process detached from the main
flow, polls it at a fixed interval and kills it once the budget is spent.

Usage:
    ```python
    with CancellableTask(["screencapture", "-x", path]) as task:
        finished = task.wait(timeout=2.0, until=lambda: os.path.exists(path))
    # The process is guaranteed to be gone here.
    ```
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from screencap.types import DEFAULT_POLL_INTERVAL

# Seconds to wait after SIGTERM before escalating to SIGKILL.
TERMINATE_GRACE: float = 0.5


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a finished or cancelled task."""

    returncode: Optional[int]
    timed_out: bool
    elapsed: float

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0


class CancellableTask:
    """A child process that can be polled, bounded in time and cancelled."""

    def __init__(
        self,
        cmd: List[str],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self.cmd = cmd
        self.poll_interval = poll_interval
        self.proc: Optional["subprocess.Popen[bytes]"] = None
        self.started_at: float = 0.0

    def start(self) -> "CancellableTask":
        """Launch the process. Raises FileNotFoundError if it does not exist."""
        self.started_at = time.monotonic()
        self.proc = subprocess.Popen(
            self.cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
        )
        return self

    @property
    def running(self) -> bool:
        return self.proc is not None and self.proc.poll() is None

    def wait(
        self,
        timeout: Optional[float] = None,
        until: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """Poll until the process exits, ``until()`` is true, or time runs out.

        Args:
            timeout: Wall-clock budget in seconds. None waits without limit.
            until: Optional completion predicate checked on every poll, for
                tools whose useful output appears before they exit.

        Returns:
            True if the task completed, False if the budget expired. An
            expired task is cancelled before returning.
        """
        if self.proc is None:
            self.start()
        assert self.proc is not None

        deadline = None if timeout is None else self.started_at + timeout
        while True:
            if self.proc.poll() is not None:
                return True
            if until is not None and until():
                return True

            now = time.monotonic()
            if deadline is not None and now >= deadline:
                self.cancel()
                return False

            sleep_for = self.poll_interval
            if deadline is not None:
                sleep_for = min(sleep_for, max(0.0, deadline - now))
            time.sleep(sleep_for)

    def cancel(self) -> None:
        """Terminate the process if it is still running, then reap it."""
        proc = self.proc
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    def __enter__(self) -> "CancellableTask":
        if self.proc is None:
            self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


def run_cancellable(
    cmd: List[str],
    timeout: Optional[float] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    until: Optional[Callable[[], bool]] = None,
) -> TaskResult:
    """Run ``cmd`` to completion or until the budget expires.

    Leaving the ``with`` block cancels the child, including on
    KeyboardInterrupt, so no tool outlives the caller.
    """
    task = CancellableTask(cmd, poll_interval=poll_interval)
    with task:
        finished = task.wait(timeout=timeout, until=until)
        returncode = task.proc.poll() if task.proc is not None else None
    return TaskResult(
        returncode=returncode,
        timed_out=not finished,
        elapsed=time.monotonic() - task.started_at,
    )
