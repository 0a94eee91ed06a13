from __future__ import annotations

import logging

from ..lib.properties import render_properties
from ..lib.staging import write_output
from ..pipeline import InstallCtx
from .step_30_stage_config import CONFIG_DIR

logger = logging.getLogger(__name__)

SPLASH_FILE = "splash.properties"
DEFAULT_HEADER = "Generated by modpack-installer"


class WriteSplashStep:
    step_id = "35_write_splash"

    def run(self, ctx: InstallCtx) -> None:
        splash = ctx.manifest.splash
        if splash is None:
            return

        text = render_properties(splash, header=ctx.manifest.pack.name or DEFAULT_HEADER)
        out = write_output(ctx.root / CONFIG_DIR / SPLASH_FILE, (text + "\n").encode("utf-8"))
        ctx.record.written.append(out)
        logger.info("The splash screen config has been written.")
