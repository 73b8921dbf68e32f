"""Crates hosted on an alternative registry, located through its index.

The index repository is mirrored as a bare git clone under the cache root.
Its config.json (read at HEAD) tells where crate files are downloaded from,
either as a URL template or as an API base URL.

Cache layout (one subtree per index, keyed by a slug of the index URL):
- <cache_dir>/registry-index/<index-slug>/          bare index mirror
- <cache_dir>/registry-sources/<index-slug>/<name>/<name>-<version>.crate
"""

import logging
from pathlib import Path

from pydantic import AnyUrl
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import TypeAdapter
from pydantic import ValidationError

from .archive import UNPACK_ERRORS
from .archive import unpack
from .download import download_to
from .download import partial_path
from .exceptions import CommandError
from .exceptions import InvalidUrlError
from .exceptions import RegistryIndexError
from .exceptions import UnpackError
from .schema import IndexConfig
from .utils import PathComponent
from .utils import slugify
from .workspace import Workspace

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

_URL_ADAPTER = TypeAdapter(AnyUrl)


def crate_prefix(name: str) -> str:
    """Index directory prefix for a crate name.

    Counts characters, not encoded bytes, exactly like the registry index
    layout does.

    Examples:
        >>> crate_prefix("a"), crate_prefix("ab"), crate_prefix("abc")
        ('1', '2', '3/a')
        >>> crate_prefix("serde")
        'se/rd'
    """
    match len(name):
        case 0:
            raise ValueError("crate name must not be empty")
        case 1:
            return "1"
        case 2:
            return "2"
        case 3:
            return f"3/{name[0]}"
        case _:
            return f"{name[0:2]}/{name[2:4]}"


def render_download_url(template: str, name: str, version: str) -> str:
    """Build the download URL for a crate from an index "dl" value.

    When the template contains any of {crate}, {version}, {prefix} or
    {lowerprefix}, every marker is substituted. Otherwise the template is a
    base URL and "/<name>/<version>/download" is appended.

    Raises:
        InvalidUrlError: The resulting URL does not parse
    """
    prefix = crate_prefix(name)
    replacements = {
        "{crate}": name,
        "{version}": version,
        "{prefix}": prefix,
        "{lowerprefix}": prefix.lower(),
    }

    if any(marker in template for marker in replacements):
        url = template
        for marker, value in replacements.items():
            url = url.replace(marker, value)
    else:
        url = f"{template}/{name}/{version}/download"

    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError as e:
        raise InvalidUrlError(f"Invalid download URL {url!r}", context={"url": url, "template": template}) from e
    return url


class RegistryCrate(BaseModel):
    """A crate version published on a registry identified by its index URL."""

    model_config = ConfigDict(frozen=True)

    name: PathComponent
    version: PathComponent
    index: str = Field(min_length=1)

    def crate_cache_path(self, workspace: Workspace) -> Path:
        return (
            workspace.cache_dir
            / "registry-sources"
            / slugify(self.index)
            / self.name
            / f"{self.name}-{self.version}.crate"
        )

    def index_cache_path(self, workspace: Workspace) -> Path:
        return workspace.cache_dir / "registry-index" / slugify(self.index)

    def update_index(self, workspace: Workspace) -> Path:
        """Clone the index mirror, or refresh it when it already exists.

        Returns:
            Path to the bare index mirror

        Raises:
            RegistryIndexError: git clone or fetch failed
        """
        path = self.index_cache_path(workspace)

        if (path / "HEAD").is_file():
            logger.info(f"Updating cached index repository {self.index}")
            try:
                workspace.commands.run(
                    "git",
                    ["-c", "remote.origin.fetch=refs/heads/*:refs/heads/*", "fetch", "origin", "--force", "--prune"],
                    cwd=path,
                )
            except CommandError as e:
                raise RegistryIndexError(f"Failed to update {self.index}", context={"index": self.index}) from e
        else:
            logger.info(f"Cloning index repository {self.index}")
            path.parent.mkdir(parents=True, exist_ok=True)
            try:
                workspace.commands.run(
                    "git",
                    ["clone", "--bare", "--no-tags", "--single-branch", self.index, str(path)],
                )
            except CommandError as e:
                raise RegistryIndexError(f"Failed to clone {self.index}", context={"index": self.index}) from e

        return path

    def index_config(self, workspace: Workspace) -> IndexConfig:
        """Refresh the index and read config.json from its current HEAD.

        Raises:
            RegistryIndexError: Index could not be updated or config.json is missing
            IndexConfigError: config.json is malformed
        """
        path = self.update_index(workspace)
        try:
            lines = workspace.commands.run_capture("git", ["show", f"HEAD:{CONFIG_FILE}"], cwd=path)
        except CommandError as e:
            raise RegistryIndexError(
                f"Failed to get config file for {self.index}",
                context={"index": self.index},
            ) from e
        return IndexConfig.from_json("\n".join(lines), index=self.index)

    def prefix(self) -> str:
        return crate_prefix(self.name)

    def download_url(self, workspace: Workspace) -> str:
        config = self.index_config(workspace)
        return render_download_url(config.dl, self.name, self.version)

    def fetch(self, workspace: Workspace) -> None:
        local = self.crate_cache_path(workspace)
        if local.exists():
            logger.info(f"Crate {self.name} {self.version} ({self.index}) is already in cache")
            return

        logger.info(f"Fetching crate {self.name} {self.version} ({self.index})...")
        local.parent.mkdir(parents=True, exist_ok=True)
        download_to(workspace.http_client, self.download_url(workspace), local)

    def purge_from_cache(self, workspace: Workspace) -> None:
        path = self.crate_cache_path(workspace)
        path.unlink(missing_ok=True)
        partial_path(path).unlink(missing_ok=True)

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        logger.info(f"Extracting crate {self.name} {self.version} ({self.index}) into {dest}")
        try:
            unpack(self.crate_cache_path(workspace), dest)
        except UNPACK_ERRORS as e:
            raise UnpackError(
                f"Failed to unpack {self.name} {self.version} ({self.index}): {e}",
                context={"name": self.name, "version": self.version, "index": self.index},
            ) from e

    def __str__(self) -> str:
        return f"registry crate {self.name} {self.version} ({self.index})"
