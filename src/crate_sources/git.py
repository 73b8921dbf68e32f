"""Crates living in a git repository.

The repository is mirrored as a bare clone under
``<cache_dir>/git-repos/<percent-escaped-url>`` and checked out into the
destination with a regular clone of that mirror.
"""

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .exceptions import CommandError
from .exceptions import GitRepositoryError
from .exceptions import PrivateRepositoryError
from .utils import escape_path
from .workspace import Workspace

logger = logging.getLogger(__name__)

_CREDENTIALS_PROMPT = "fatal: could not read Username"


def _asks_for_credentials(error: CommandError) -> bool:
    return any(line.startswith(_CREDENTIALS_PROMPT) for line in error.stderr_lines)


class GitRepo(BaseModel):
    """A git repository identified by its clone URL."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)

    def cached_path(self, workspace: Workspace) -> Path:
        return workspace.cache_dir / "git-repos" / escape_path(self.url)

    def git_commit(self, workspace: Workspace) -> str | None:
        """Commit at HEAD of the cached mirror, or None if it can't be read."""
        path = self.cached_path(workspace)
        if not path.is_dir():
            return None
        try:
            lines = workspace.commands.run_capture("git", ["rev-parse", "HEAD"], cwd=path)
        except CommandError as e:
            logger.debug(f"Could not read commit of {self.url}: {e}")
            return None
        for line in lines:
            if line.strip():
                return line.strip()
        return None

    def fetch(self, workspace: Workspace) -> None:
        path = self.cached_path(workspace)

        try:
            if (path / "HEAD").is_file():
                logger.info(f"Updating cached repository {self.url}")
                workspace.commands.run(
                    "git",
                    ["-c", "remote.origin.fetch=refs/heads/*:refs/heads/*", "fetch", "origin", "--force", "--prune"],
                    cwd=path,
                )
            else:
                logger.info(f"Cloning repository {self.url}")
                path.parent.mkdir(parents=True, exist_ok=True)
                workspace.commands.run("git", ["clone", "--bare", self.url, str(path)])
        except CommandError as e:
            if _asks_for_credentials(e):
                raise PrivateRepositoryError(
                    f"Repository {self.url} is private or does not exist",
                    context={"url": self.url},
                ) from e
            raise GitRepositoryError(f"Failed to fetch {self.url}", context={"url": self.url}) from e

    def purge_from_cache(self, workspace: Workspace) -> None:
        path = self.cached_path(workspace)
        if path.exists():
            shutil.rmtree(path)

    def copy_source_to(self, workspace: Workspace, dest: Path) -> None:
        logger.info(f"Checking out {self.url} into {dest}")
        try:
            workspace.commands.run("git", ["clone", str(self.cached_path(workspace)), str(dest)])
        except CommandError as e:
            raise GitRepositoryError(
                f"Failed to checkout {self.url}",
                context={"url": self.url, "dest": str(dest)},
            ) from e

    def __str__(self) -> str:
        return f"git repo {self.url}"
