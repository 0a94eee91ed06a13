from __future__ import annotations

import argparse
import logging
from typing import Optional

from .errors import InstallerError
from .lib.command import Launcher, launch_detached
from .lib.fetch import ModFetcher
from .logging_utils import Severity, configure_logging, report
from .manifest import Manifest, load_manifest
from .pipeline import InstallCtx, PipelineResult, RunOptions, run_pipeline
from .steps import (
    FetchModsStep,
    FinishHookStep,
    StageConfigStep,
    StageModsStep,
    StageRootStep,
    StartHookStep,
    ValidateManifestStep,
    WriteServersStep,
    WriteSplashStep,
)

logger = logging.getLogger(__name__)


DEFAULT_FOLDER = "."

EXIT_OK = 0
EXIT_FATAL = 1


def build_steps():
    return [
        ValidateManifestStep(),
        StageRootStep(),
        StartHookStep(),
        WriteServersStep(),
        StageConfigStep(),
        WriteSplashStep(),
        StageModsStep(),
        FetchModsStep(),
        FinishHookStep(),
    ]


def run_install(
    manifest: Manifest,
    options: RunOptions,
    *,
    fetcher: Optional[ModFetcher] = None,
    launcher: Launcher = launch_detached,
) -> PipelineResult:
    """Install a modpack into ``options.destination_root``.

    Raises an InstallerError subclass on the first fatal condition; never
    exits the process.
    """

    if fetcher is None:
        # The default HTTP session lives only as long as this run.
        with ModFetcher() as owned:
            return run_install(manifest, options, fetcher=owned, launcher=launcher)

    ctx = InstallCtx(
        manifest=manifest,
        options=options,
        fetcher=fetcher,
        launcher=launcher,
    )
    return run_pipeline(ctx=ctx, steps=build_steps())


def install_from_file(
    config_path: str,
    options: RunOptions,
    *,
    fetcher: Optional[ModFetcher] = None,
    launcher: Launcher = launch_detached,
) -> PipelineResult:
    return run_install(load_manifest(config_path), options, fetcher=fetcher, launcher=launcher)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="modpack-installer",
        description="Installs a modpack using a modpack configuration file.",
    )
    p.add_argument("-c", "--config", required=True, help="Path to the modpack config (json|yaml)")
    p.add_argument("-f", "--folder", default=DEFAULT_FOLDER, help="The path to the .minecraft folder.")
    p.add_argument("--clean", action="store_true", help="Empty the target folders before installing")
    p.add_argument("--skip-hooks", action="store_true", help="Do not run the pack's start/finish scripts")
    p.add_argument("--log", default=None, help="Also write a detailed log to this file")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO

    try:
        configure_logging(log_path=args.log, level=level)
    except OSError as e:
        configure_logging(log_path=None, level=level)
        report(Severity.CRITICAL, f"Could not open the log file {args.log}: {e.strerror or e}")
        return EXIT_FATAL

    options = RunOptions(
        destination_root=args.folder,
        clean=bool(args.clean),
        skip_hooks=bool(args.skip_hooks),
    )

    try:
        install_from_file(args.config, options)
    except InstallerError as e:
        # Fatal: report once and stop. Partially written files are left as-is.
        logger.debug("Installation aborted", exc_info=True)
        report(Severity.CRITICAL, str(e))
        return EXIT_FATAL
    except Exception:
        logger.exception("Installer failed")
        raise

    report(Severity.SUCCESS, "Finished!")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
