"""crate-sources - Fetch, cache and materialize Rust crate sources.

Sources: crates.io, alternative registries (via their git index), git
repositories and local directories, all behind the Crate type.

Apps inject the cache root, HTTP client and command runner through Workspace.
"""

from .archive import unpack
from .commands import SubprocessRunner
from .crate import Crate
from .cratesio import CratesIOCrate
from .exceptions import CommandError
from .exceptions import CrateSourceError
from .exceptions import DownloadError
from .exceptions import GitRepositoryError
from .exceptions import IndexConfigError
from .exceptions import InvalidUrlError
from .exceptions import PrivateRepositoryError
from .exceptions import RegistryIndexError
from .exceptions import UnpackError
from .git import GitRepo
from .local import LocalCrate
from .protocols import CommandRunner
from .protocols import CrateSource
from .protocols import HttpClient
from .registry import RegistryCrate
from .registry import crate_prefix
from .registry import render_download_url
from .schema import IndexConfig
from .utils import slugify
from .workspace import Workspace

__all__ = [
    # Crates
    "Crate",
    "CratesIOCrate",
    "RegistryCrate",
    "GitRepo",
    "LocalCrate",
    # Collaborators
    "Workspace",
    "SubprocessRunner",
    "CrateSource",
    "HttpClient",
    "CommandRunner",
    # Registry index
    "IndexConfig",
    "crate_prefix",
    "render_download_url",
    # Archives
    "unpack",
    # Exceptions
    "CrateSourceError",
    "CommandError",
    "DownloadError",
    "GitRepositoryError",
    "IndexConfigError",
    "InvalidUrlError",
    "PrivateRepositoryError",
    "RegistryIndexError",
    "UnpackError",
    # Utilities
    "slugify",
]

__version__ = "0.1.0"
