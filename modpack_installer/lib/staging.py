from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..errors import FilesystemError

logger = logging.getLogger(__name__)


def _empty_dir(path: Path) -> None:
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def stage_dir(root: str | Path, *segments: str, clean: bool = False) -> Path:
    """Bring ``root/segments...`` to a known state before writing into it.

    - clean=False: create the directory (and parents) if missing, keep contents.
    - clean=True: remove the directory tree if present, then recreate it empty.
      A symlink to a directory is kept and the directory it points at is emptied.
    """

    target = Path(root).expanduser().joinpath(*segments).absolute()

    try:
        if clean and (target.exists() or target.is_symlink()):
            if target.is_symlink() and target.is_dir():
                logger.debug("Emptying %s (linked to %s)", target, target.resolve())
                _empty_dir(target)
            elif target.is_dir():
                logger.debug("Removing %s", target)
                shutil.rmtree(target)
            else:
                raise FilesystemError(f"Cannot stage {target}: a file is in the way")
        target.mkdir(parents=True, exist_ok=True)
    except FilesystemError:
        raise
    except OSError as e:
        raise FilesystemError(f"Could not prepare the folder {target}: {e.strerror or e}") from e

    logger.debug("Staged %s (clean=%s)", target, clean)
    return target


def write_output(path: str | Path, data: bytes) -> Path:
    """Write a generated file, replacing any existing one."""

    p = Path(path)
    try:
        p.write_bytes(data)
    except OSError as e:
        raise FilesystemError(f"Could not write {p}: {e.strerror or e}") from e
    return p


def is_plain_filename(name: str) -> bool:
    """True when ``name`` names a file directly inside a folder."""

    if not name or name in (".", ".."):
        return False
    return not any(sep in name for sep in ("/", "\\", "\x00"))
