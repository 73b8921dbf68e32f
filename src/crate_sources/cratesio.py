"""Crates hosted on crates.io, downloaded from its static file host."""

import logging
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict

from .archive import UNPACK_ERRORS
from .archive import unpack
from .download import download_to
from .download import partial_path
from .exceptions import UnpackError
from .utils import PathComponent
from .workspace import Workspace

logger = logging.getLogger(__name__)

CRATES_ROOT = "https://static.crates.io/crates"


class CratesIOCrate(BaseModel):
    """A crate version published on crates.io."""

    model_config = ConfigDict(frozen=True)

    name: PathComponent
    version: PathComponent

    def cache_path(self, workspace: Workspace) -> Path:
        return workspace.cache_dir / "cratesio-sources" / self.name / f"{self.name}-{self.version}.crate"

    def download_url(self) -> str:
        return f"{CRATES_ROOT}/{self.name}/{self.name}-{self.version}.crate"

    def fetch(self, workspace: Workspace) -> None:
        local = self.cache_path(workspace)
        if local.exists():
            logger.info(f"Crate {self.name} {self.version} is already in cache")
            return

        logger.info(f"Fetching crate {self.name} {self.version}...")
        local.parent.mkdir(parents=True, exist_ok=True)
        download_to(workspace.http_client, self.download_url(), local)

    def purge_from_cache(self, workspace: Workspace) -> None:
        path = self.cache_path(workspace)
        path.unlink(missing_ok=True)
        partial_path(path).unlink(missing_ok=True)

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        logger.info(f"Extracting crate {self.name} {self.version} into {dest}")
        try:
            unpack(self.cache_path(workspace), dest)
        except UNPACK_ERRORS as e:
            raise UnpackError(
                f"Failed to unpack {self.name} {self.version}: {e}",
                context={"name": self.name, "version": self.version},
            ) from e

    def __str__(self) -> str:
        return f"crates.io crate {self.name} {self.version}"
