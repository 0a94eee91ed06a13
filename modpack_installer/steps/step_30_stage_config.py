from __future__ import annotations

from ..lib.staging import stage_dir
from ..pipeline import InstallCtx

CONFIG_DIR = "config"


class StageConfigStep:
    step_id = "30_stage_config"

    def run(self, ctx: InstallCtx) -> None:
        stage_dir(ctx.root, CONFIG_DIR, clean=ctx.options.clean)
