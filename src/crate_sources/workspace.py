"""Workspace - the cache root plus injected network and process capabilities.

Apps decide where the cache lives and how HTTP and subprocesses behave; the
sources only consume what the workspace hands them.
"""

from pathlib import Path

import requests

from .commands import SubprocessRunner
from .protocols import CommandRunner
from .protocols import HttpClient


def _default_http_client() -> requests.Session:
    from . import __version__

    session = requests.Session()
    session.headers["User-Agent"] = f"crate-sources/{__version__}"
    return session


class Workspace:
    """Cache root and collaborators shared by all crate sources."""

    def __init__(
        self,
        cache_dir: Path | str,
        http_client: HttpClient | None = None,
        commands: CommandRunner | None = None,
    ):
        """Initialize workspace with app-provided cache location.

        Args:
            cache_dir: Base directory for every cache subtree (created lazily)
            http_client: HTTP capability (defaults to a requests.Session)
            commands: Subprocess capability (defaults to SubprocessRunner)

        Example:
            >>> workspace = Workspace(Path.home() / ".cache" / "crate-sources")
            >>> Crate.crates_io("rand", "0.3.14").fetch(workspace)
        """
        self.cache_dir = Path(cache_dir)
        self.http_client = http_client if http_client is not None else _default_http_client()
        self.commands = commands if commands is not None else SubprocessRunner()

    def __repr__(self) -> str:
        return f"Workspace(cache_dir={str(self.cache_dir)!r})"
