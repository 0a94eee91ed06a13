from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol, Sequence

from .lib.command import Launcher, launch_detached
from .lib.fetch import ModFetcher
from .manifest import Manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    destination_root: str
    clean: bool = False
    skip_hooks: bool = False


@dataclass
class InstallRecord:
    """What a run has produced so far."""

    written: List[Path] = field(default_factory=list)
    mods: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class InstallCtx:
    manifest: Manifest
    options: RunOptions
    fetcher: ModFetcher
    launcher: Launcher = launch_detached
    record: InstallRecord = field(default_factory=InstallRecord)

    @property
    def root(self) -> Path:
        return Path(self.options.destination_root).expanduser().absolute()


class Step(Protocol):
    """A single pipeline step."""

    step_id: str

    def run(self, ctx: InstallCtx) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    record: InstallRecord
    ran_steps: List[str]


def run_pipeline(*, ctx: InstallCtx, steps: Sequence[Step]) -> PipelineResult:
    """Run steps strictly in order; the first exception stops the run."""

    ran: List[str] = []

    for step in steps:
        logger.debug("Running step %s", step.step_id)
        step.run(ctx)
        ran.append(step.step_id)

    return PipelineResult(record=ctx.record, ran_steps=ran)
