from __future__ import annotations

import enum
import json
import logging
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ManifestError
from .lib.staging import is_plain_filename

logger = logging.getLogger(__name__)


class SourceKind(enum.Enum):
    """Where a mod's bytes come from."""

    CURSEFORGE = "curseforge"
    DIRECT = "direct"


# Manifest "type" spellings accepted for each source kind.
_SOURCE_ALIASES: Dict[Optional[str], SourceKind] = {
    None: SourceKind.DIRECT,
    "": SourceKind.DIRECT,
    "url": SourceKind.DIRECT,
    "direct": SourceKind.DIRECT,
    "curseforge": SourceKind.CURSEFORGE,
    "forge": SourceKind.CURSEFORGE,
}

HOOK_NAMES = ("start", "finish")


@dataclass(frozen=True)
class PackInfo:
    format: float
    name: Optional[str] = None


@dataclass(frozen=True)
class ServerEntry:
    name: str
    ip: str


@dataclass(frozen=True)
class ModItem:
    source: SourceKind
    url: Optional[str] = None
    project_id: Optional[str] = None
    file_id: Optional[str] = None
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.url or f"{self.project_id}/{self.file_id}"


@dataclass(frozen=True)
class Manifest:
    pack: PackInfo
    servers: Tuple[ServerEntry, ...] = ()
    splash: Optional[Mapping[str, Any]] = None
    mods: Tuple[ModItem, ...] = ()
    scripts: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def script(self, hook_name: str) -> Optional[str]:
        cmd = self.scripts.get(hook_name)
        if cmd is None or not str(cmd).strip():
            return None
        return str(cmd)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _require_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ManifestError(f"{where} must be a string")
    return value


def _optional_id(value: Any, where: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ManifestError(f"{where} must be a string or integer")
    return str(value)


def _parse_pack(raw: Any) -> PackInfo:
    if not isinstance(raw, dict):
        raise ManifestError("The modpack config has no pack section.")
    fmt = raw.get("format")
    if fmt is None:
        raise ManifestError("The modpack config does not declare pack.format.")
    if not _is_number(fmt):
        raise ManifestError(f"pack.format must be a number, got {fmt!r}")
    name = raw.get("name")
    if name is not None:
        name = _require_str(name, "pack.name")
    return PackInfo(format=fmt, name=name or None)


def _parse_servers(raw: Any) -> Tuple[ServerEntry, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ManifestError("servers must be a list")
    out = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ManifestError(f"servers[{i}] must be an object")
        out.append(
            ServerEntry(
                name=_require_str(entry.get("name"), f"servers[{i}].name"),
                ip=_require_str(entry.get("ip"), f"servers[{i}].ip"),
            )
        )
    return tuple(out)


def _parse_splash(raw: Any) -> Optional[Mapping[str, Any]]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ManifestError("splash must be a mapping of key to value")
    for k, v in raw.items():
        if isinstance(v, (dict, list)):
            raise ManifestError(f"splash.{k} must be a scalar value")
    return MappingProxyType({str(k): v for k, v in raw.items()})


def parse_mod(raw: Any, index: int = 0) -> ModItem:
    where = f"mods[{index}]"
    if not isinstance(raw, dict):
        raise ManifestError(f"{where} must be an object")

    kind_raw = raw.get("type")
    key = kind_raw.lower() if isinstance(kind_raw, str) else kind_raw
    try:
        source = _SOURCE_ALIASES[key]
    except (KeyError, TypeError):
        raise ManifestError(f"{where}.type {kind_raw!r} is not a known mod source") from None

    name = raw.get("name")
    if name is not None:
        name = _require_str(name, f"{where}.name") or None
    if name is not None and not is_plain_filename(name):
        raise ManifestError(f"{where}.name {name!r} must be a plain file name")

    if source is SourceKind.CURSEFORGE:
        project_id = _optional_id(raw.get("projectID"), f"{where}.projectID")
        file_id = _optional_id(raw.get("fileID"), f"{where}.fileID")
        if not project_id or not file_id:
            raise ManifestError(f"{where} needs projectID and fileID for CurseForge mods")
        return ModItem(source=source, project_id=project_id, file_id=file_id, name=name)

    url = raw.get("url")
    if not isinstance(url, str) or not url:
        raise ManifestError(f"{where} needs a url")
    return ModItem(source=source, url=url, name=name)


def _parse_mods(raw: Any) -> Tuple[ModItem, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ManifestError("mods must be a list")
    return tuple(parse_mod(m, i) for i, m in enumerate(raw))


def _parse_scripts(raw: Any) -> Mapping[str, str]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict):
        raise ManifestError("scripts must be a mapping")
    out: Dict[str, str] = {}
    for hook in HOOK_NAMES:
        cmd = raw.get(hook)
        if cmd is not None:
            out[hook] = _require_str(cmd, f"scripts.{hook}")
    return MappingProxyType(out)


def parse_manifest(data: Any) -> Manifest:
    """Validate raw manifest data and build the read-only model."""

    if not isinstance(data, dict):
        raise ManifestError("The modpack config must contain an object.")

    return Manifest(
        pack=_parse_pack(data.get("pack")),
        servers=_parse_servers(data.get("servers")),
        splash=_parse_splash(data.get("splash")),
        mods=_parse_mods(data.get("mods")),
        scripts=_parse_scripts(data.get("scripts")),
    )


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_manifest(path: str) -> Manifest:
    """Read a JSON or YAML modpack config and validate it."""

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError("Could not read the modpack config file.") from e

    try:
        if _detect_format(p) == "json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        raise ManifestError("Could not parse the modpack config file.") from e

    logger.debug("Loaded modpack config from %s", p)
    return parse_manifest(data)


def validate_manifest(manifest: Manifest) -> Manifest:
    """Reject manifests written for another schema before any disk work."""

    if not isinstance(manifest, Manifest):
        raise ManifestError("The modpack config could not be read.")
    if not _is_number(manifest.pack.format):
        raise ManifestError(f"pack.format must be a number, got {manifest.pack.format!r}")
    return manifest
