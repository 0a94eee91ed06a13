from __future__ import annotations

from ..lib.hooks import run_hook
from ..pipeline import InstallCtx


class FinishHookStep:
    step_id = "90_finish_hook"

    def run(self, ctx: InstallCtx) -> None:
        run_hook("finish", ctx.manifest, ctx.options, launcher=ctx.launcher)
