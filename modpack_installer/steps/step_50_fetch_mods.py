from __future__ import annotations

import logging

from ..pipeline import InstallCtx
from .step_40_stage_mods import MODS_DIR

logger = logging.getLogger(__name__)


class FetchModsStep:
    step_id = "50_fetch_mods"

    def run(self, ctx: InstallCtx) -> None:
        mods_dir = ctx.root / MODS_DIR
        total = len(ctx.manifest.mods)
        logger.debug("Fetching %d mod(s) into %s", total, mods_dir)

        # One at a time, in manifest order; the first failure ends the run.
        for item in ctx.manifest.mods:
            filename = ctx.fetcher.fetch(item, mods_dir)
            ctx.record.mods.append(filename)
            ctx.record.written.append(mods_dir / filename)
