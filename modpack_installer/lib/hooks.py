from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from ..manifest import Manifest
from ..pipeline import RunOptions
from .command import Launcher, launch_detached

logger = logging.getLogger(__name__)

FOLDER_ENV_VAR = "MODPACK_FOLDER"


def run_hook(
    hook_name: str,
    manifest: Manifest,
    options: RunOptions,
    *,
    launcher: Launcher = launch_detached,
) -> Optional[subprocess.Popen]:
    """Launch ``scripts[hook_name]`` if configured; never waits for it."""

    if options.skip_hooks:
        logger.debug("Hooks disabled; not running %s", hook_name)
        return None

    command = manifest.script(hook_name)
    if command is None:
        return None

    env = {FOLDER_ENV_VAR: str(Path(options.destination_root).expanduser().absolute())}
    logger.info("Running the %s script.", hook_name)
    try:
        return launcher(command, cwd=os.getcwd(), env=env)
    except OSError as e:
        # A hook that cannot start never aborts the install.
        logger.error("Could not run the %s script: %s", hook_name, e)
        return None
