from __future__ import annotations

import logging
import os
import subprocess
from typing import Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class Launcher(Protocol):
    def __call__(self, command: str, *, cwd: str, env: Mapping[str, str]) -> Optional[subprocess.Popen]:
        ...


def launch_detached(
    command: str,
    *,
    cwd: str,
    env: Mapping[str, str] | None = None,
) -> subprocess.Popen:
    """Start a shell command and return immediately.

    - Always logs the command.
    - Inherits stdout/stderr so hook output shows up next to ours.
    - The caller never waits on or inspects the child.
    """

    logger.info("CMD %s", command)
    return subprocess.Popen(
        command,
        shell=True,
        cwd=cwd,
        env=dict(os.environ, **(env or {})),
    )
