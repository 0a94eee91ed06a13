from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, List, Union

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from modpack_installer.errors import FetchError
from modpack_installer.lib.fetch import FetchedPayload
from modpack_installer.logging_utils import ConsoleFormatter


class FakeTransport:
    """Serves canned bodies by URL instead of going to the network."""

    def __init__(self, bodies: Dict[str, Union[bytes, Exception]], redirects: Dict[str, str] | None = None):
        self.bodies = bodies
        self.redirects = redirects or {}
        self.calls: List[str] = []

    def fetch_bytes(self, url: str) -> FetchedPayload:
        self.calls.append(url)
        body = self.bodies.get(url)
        if body is None:
            raise FetchError(f"404 for {url}")
        if isinstance(body, Exception):
            raise body
        return FetchedPayload(content=body, resolved_url=self.redirects.get(url, url))


class RecordingLauncher:
    def __init__(self):
        self.calls: list[dict] = []

    def __call__(self, command, *, cwd, env):
        self.calls.append({"command": command, "cwd": cwd, "env": dict(env)})
        return None


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler) or isinstance(h.formatter, ConsoleFormatter):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    for attr in ("_modpack_configured", "_modpack_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
