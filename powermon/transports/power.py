"""OS-level shutdown action."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence

from powermon.core.errors import ShutdownError


def default_shutdown_command(*, sudo: bool = False, platform: str | None = None) -> tuple[str, ...]:
    platform = platform or sys.platform
    if platform.startswith("win"):
        # Does not force applications closed and may install pending updates.
        return ("shutdown", "/s", "/t", "0")
    command = ("shutdown", "now")
    return ("sudo", *command) if sudo else command


class SystemShutdown:
    def __init__(self, command: Sequence[str] | None = None, *, sudo: bool = False) -> None:
        self.command = tuple(command) if command else default_shutdown_command(sudo=sudo)

    def __call__(self) -> None:
        try:
            result = subprocess.run(
                self.command,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise ShutdownError(f"Command not found: {self.command[0]}") from exc
        except OSError as exc:
            raise ShutdownError(f"{' '.join(self.command)} -> {exc}") from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ShutdownError(
                f"{' '.join(self.command)} exited with status {result.returncode}"
                + (f": {stderr}" if stderr else "")
            )
