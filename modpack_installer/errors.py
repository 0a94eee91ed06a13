from __future__ import annotations


class InstallerError(RuntimeError):
    """Base class for conditions that end an installation run."""


class ManifestError(InstallerError):
    pass


class FilesystemError(InstallerError):
    pass


class FetchError(InstallerError):
    pass


class EncodingError(InstallerError):
    pass
