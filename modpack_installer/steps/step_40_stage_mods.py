from __future__ import annotations

from ..lib.staging import stage_dir
from ..pipeline import InstallCtx

MODS_DIR = "mods"


class StageModsStep:
    step_id = "40_stage_mods"

    def run(self, ctx: InstallCtx) -> None:
        stage_dir(ctx.root, MODS_DIR, clean=ctx.options.clean)
