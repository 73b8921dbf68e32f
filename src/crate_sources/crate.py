"""Crate - one public surface over every crate source variant.

Callers build a Crate for an origin, fetch() it into the workspace cache and
then copy_source_to() a build directory:

    >>> workspace = Workspace(Path("/var/cache/crates"))
    >>> krate = Crate.crates_io("rand", "0.3.14")
    >>> krate.fetch(workspace)
    >>> krate.copy_source_to(workspace, Path("/tmp/build/rand"))
"""

import logging
from pathlib import Path

from .cratesio import CratesIOCrate
from .git import GitRepo
from .local import LocalCrate
from .protocols import CrateSource
from .registry import RegistryCrate
from .utils import remove_path
from .workspace import Workspace

logger = logging.getLogger(__name__)


class Crate:
    """A Rust crate that can be fetched, cached and materialized."""

    def __init__(self, source: CratesIOCrate | RegistryCrate | GitRepo | LocalCrate):
        self._source = source

    @classmethod
    def crates_io(cls, name: str, version: str) -> "Crate":
        """Load a crate from the crates.io registry."""
        return cls(CratesIOCrate(name=name, version=version))

    @classmethod
    def registry(cls, name: str, version: str, index: str) -> "Crate":
        """Load a crate from an alternative registry identified by its index URL."""
        return cls(RegistryCrate(name=name, version=version, index=index))

    @classmethod
    def git(cls, url: str) -> "Crate":
        """Load a crate from a git repository (full clone URL)."""
        return cls(GitRepo(url=url))

    @classmethod
    def local(cls, path: Path | str) -> "Crate":
        """Load a crate from a directory on the local filesystem."""
        return cls(LocalCrate(path=Path(path)))

    @property
    def kind(self) -> str:
        """Origin kind: "crates-io", "registry", "git" or "local"."""
        return self.identity[0]

    @property
    def identity(self) -> tuple:
        """Immutable cache identity: origin kind followed by its parameters."""
        match self._source:
            case CratesIOCrate(name=name, version=version):
                return ("crates-io", name, version)
            case RegistryCrate(name=name, version=version, index=index):
                return ("registry", name, version, index)
            case GitRepo(url=url):
                return ("git", url)
            case LocalCrate(path=path):
                return ("local", path)
        raise TypeError(f"Unknown crate source: {self._source!r}")

    def fetch(self, workspace: Workspace) -> None:
        """Fetch the source into the workspace cache.

        May reach out to the network or run git. Does nothing when the crate is
        already cached.
        """
        self._as_source().fetch(workspace)

    def purge_from_cache(self, workspace: Workspace) -> None:
        """Remove the cached copy of this crate; no-op if it isn't cached."""
        self._as_source().purge_from_cache(workspace)

    def git_commit(self, workspace: Workspace) -> str | None:
        """Best-effort commit of a git crate; None for any other crate or on failure."""
        if isinstance(self._source, GitRepo):
            return self._source.git_commit(workspace)
        return None

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        """Materialize the crate source into dest.

        Any existing content at dest is removed first, so dest always ends up
        holding exactly the crate source.
        """
        if dest.exists() or dest.is_symlink():
            logger.info(f"Crate source directory {dest} already exists, cleaning it up")
            remove_path(dest)
        self._as_source().copy_source_to(workspace, dest)

    def _as_source(self) -> CrateSource:
        match self._source:
            case CratesIOCrate() | RegistryCrate() | GitRepo() | LocalCrate():
                return self._source
        raise TypeError(f"Unknown crate source: {self._source!r}")

    def __str__(self) -> str:
        return str(self._as_source())

    def __repr__(self) -> str:
        return f"Crate({self._source!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Crate):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)
