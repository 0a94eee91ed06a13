from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import unquote, urlsplit

import requests

from ..errors import FetchError, FilesystemError
from ..manifest import ModItem, SourceKind
from .staging import is_plain_filename

logger = logging.getLogger(__name__)

CURSEFORGE_DOWNLOAD_URL = "https://minecraft.curseforge.com/projects/{project_id}/files/{file_id}/download"
MOD_SUFFIX = ".jar"
DEFAULT_TIMEOUT_S = 60.0
USER_AGENT = "modpack-installer/1.0"


@dataclass(frozen=True)
class FetchedPayload:
    content: bytes
    resolved_url: str


class ByteFetcher(Protocol):
    def fetch_bytes(self, url: str) -> FetchedPayload:
        ...


def resolve_mod_url(item: ModItem) -> str:
    if item.source is SourceKind.CURSEFORGE:
        return CURSEFORGE_DOWNLOAD_URL.format(project_id=item.project_id, file_id=item.file_id)
    if item.source is SourceKind.DIRECT:
        return str(item.url)
    raise FetchError(f"No download URL for source {item.source!r}")


def filename_from_url(url: str) -> str:
    """Last path segment of a URL, percent-decoded."""

    path = urlsplit(url).path
    return unquote(path.rstrip("/").rsplit("/", 1)[-1])


class HttpFetcher:
    """Fetch whole response bodies over HTTP(S), following redirects."""

    def __init__(self, *, timeout_s: float = DEFAULT_TIMEOUT_S, session: Optional[requests.Session] = None):
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def fetch_bytes(self, url: str) -> FetchedPayload:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}") from e
        return FetchedPayload(content=response.content, resolved_url=response.url or url)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ModFetcher:
    """Download one mod at a time and place it under a mods folder."""

    def __init__(self, transport: Optional[ByteFetcher] = None):
        self.transport = transport or HttpFetcher()

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "ModFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch(self, item: ModItem, destination_dir: str | Path) -> str:
        url = resolve_mod_url(item)

        try:
            payload = self.transport.fetch_bytes(url)
        except FetchError as e:
            logger.debug("Fetch failed for %s: %s", item.label, e)
            if item.name:
                raise FetchError(f"Could not fetch the {item.name} mod.") from e
            raise FetchError("Could not fetch a mod.") from e

        base = item.name or filename_from_url(payload.resolved_url)
        # Decoding can turn %2F into a separator; never write outside destination_dir.
        if not is_plain_filename(base):
            raise FetchError(f"Could not work out a safe file name for {url}")
        filename = base + MOD_SUFFIX

        out = Path(destination_dir) / filename
        try:
            out.write_bytes(payload.content)
        except OSError as e:
            raise FilesystemError(f"Could not write {out}: {e.strerror or e}") from e

        logger.info("Downloaded %s.", filename)
        return filename
