from __future__ import annotations

from ..lib.hooks import run_hook
from ..pipeline import InstallCtx


class StartHookStep:
    step_id = "10_start_hook"

    def run(self, ctx: InstallCtx) -> None:
        run_hook("start", ctx.manifest, ctx.options, launcher=ctx.launcher)
