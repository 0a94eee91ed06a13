from __future__ import annotations

import logging

from ..lib.staging import stage_dir
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class StageRootStep:
    step_id = "05_stage_root"

    def run(self, ctx: InstallCtx) -> None:
        root = stage_dir(ctx.root, clean=ctx.options.clean)
        logger.debug("Installing into %s", root)
