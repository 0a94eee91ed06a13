from __future__ import annotations

import logging

from ..manifest import validate_manifest
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class ValidateManifestStep:
    step_id = "00_validate_manifest"

    def run(self, ctx: InstallCtx) -> None:
        manifest = validate_manifest(ctx.manifest)

        if manifest.pack.name:
            logger.info("Installing the %s modpack.", manifest.pack.name)
        else:
            logger.info("Installing the modpack.")
