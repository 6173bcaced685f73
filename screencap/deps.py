#!/usr/bin/env python3
"""Detect missing external programs and explain how to install them."""

from __future__ import annotations

import shutil
import subprocess
import sys
from typing import List, Optional, TextIO, Tuple

from screencap.types import MissingDependencyError

# (command, package) pairs that every recording needs.
REQUIRED_TOOLS: Tuple[Tuple[str, str], ...] = (("ffmpeg", "ffmpeg"),)

# (package manager, label, install command template), tried in order.
LINUX_MANAGERS: Tuple[Tuple[str, str, str], ...] = (
    ("apt-get", "Debian/Ubuntu", "sudo apt-get update && sudo apt-get install {}"),
    ("dnf", "Fedora", "sudo dnf install {}"),
    ("yum", "RHEL/CentOS", "sudo yum install {}"),
    ("pacman", "Arch Linux", "sudo pacman -S {}"),
    ("zypper", "openSUSE", "sudo zypper install {}"),
)


def install_hint(package: str, platform: Optional[str] = None) -> List[str]:
    """Lines telling the user how to install ``package`` on this platform."""
    platform = platform or sys.platform

    if platform == "darwin":
        if shutil.which("brew"):
            return ["To install with Homebrew:", f"   brew install {package}"]
        if shutil.which("port"):
            return ["To install with MacPorts:", f"   sudo port install {package}"]
        return [
            "Please install Homebrew first (https://brew.sh), then run:",
            f"   brew install {package}",
        ]

    if platform.startswith("linux"):
        for manager, label, template in LINUX_MANAGERS:
            if shutil.which(manager):
                return [f"To install on {label}:", f"   {template.format(package)}"]
        return [f"Please install {package} using your distribution's package manager."]

    return [f"Please install {package} for your operating system."]


def check_dependency(cmd: str, package: str, err: TextIO = sys.stderr) -> bool:
    """Return True if ``cmd`` is on PATH, otherwise print install help."""
    if shutil.which(cmd):
        return True
    print(f"Error: '{cmd}' is not installed.", file=err)
    for line in install_hint(package):
        print(line, file=err)
    return False


def has_hevc_videotoolbox() -> bool:
    """Whether ffmpeg was built with the VideoToolbox HEVC encoder."""
    try:
        result = subprocess.run(
            ["ffmpeg", "-hide_banner", "-encoders"],
            capture_output=True, text=True, check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False
    return "hevc_videotoolbox" in result.stdout


def check_dependencies(verbose: bool = False, err: TextIO = sys.stderr) -> None:
    """Verify every required tool is installed.

    Raises:
        MissingDependencyError: If any required tool is missing.
    """
    if verbose:
        print("Checking dependencies...", file=err)

    missing = [cmd for cmd, package in REQUIRED_TOOLS if not check_dependency(cmd, package, err)]

    if sys.platform == "darwin" and not missing and not has_hevc_videotoolbox():
        print("Warning: Hardware-accelerated HEVC codec not available.", file=err)
        print("         Consider reinstalling ffmpeg with: brew reinstall ffmpeg", file=err)

    if missing:
        raise MissingDependencyError(
            f"Missing dependencies: {', '.join(missing)} "
            "(set SKIP_DEPS_CHECK=1 to skip this check)"
        )
