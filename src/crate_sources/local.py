"""Crates living in a directory on the local filesystem."""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict

from .utils import remove_quietly
from .workspace import Workspace

logger = logging.getLogger(__name__)

# Build output at the crate root is never part of the source
_IGNORED_TOP_LEVEL_DIRS = frozenset({"target"})


def _ignore_build_output(root: Path) -> Callable[[str, list[str]], set[str]]:
    def ignore(directory: str, names: list[str]) -> set[str]:
        if Path(directory) != root:
            return set()
        ignored = {name for name in names if name in _IGNORED_TOP_LEVEL_DIRS and (root / name).is_dir()}
        for name in ignored:
            logger.info(f"Ignoring top-level directory {root / name}")
        return ignored

    return ignore


class LocalCrate(BaseModel):
    """A crate whose source is an existing local directory (nothing to fetch)."""

    model_config = ConfigDict(frozen=True)

    path: Path

    def fetch(self, workspace: Workspace) -> None:
        pass

    def purge_from_cache(self, workspace: Workspace) -> None:
        pass

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        """Recursively copy the directory into dest, following symlinks.

        A top-level target/ directory is skipped. If the copy fails partway,
        dest is removed before the error propagates.
        """
        logger.info(f"Copying local crate {self.path} into {dest}")
        try:
            shutil.copytree(self.path, dest, ignore=_ignore_build_output(self.path))
        except OSError:
            remove_quietly(dest)
            raise

    def __str__(self) -> str:
        return f"local crate {self.path}"
