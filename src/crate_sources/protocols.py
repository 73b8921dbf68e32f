"""Protocols for crate sources and their injected collaborators.

The library never constructs network or process machinery on its own terms:
apps provide an HTTP client and a command runner, and every source variant
implements the same CrateSource contract.
"""

from collections.abc import Iterator
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Protocol
from typing import runtime_checkable

if TYPE_CHECKING:
    from .workspace import Workspace


class HttpResponse(Protocol):
    """Streamable HTTP response (``requests.Response`` satisfies this)."""

    def raise_for_status(self) -> None: ...

    def iter_content(self, chunk_size: int) -> Iterator[bytes]: ...

    def close(self) -> None: ...


@runtime_checkable
class HttpClient(Protocol):
    """Blocking HTTP GET capability (``requests.Session`` satisfies this)."""

    def get(self, url: str, *, stream: bool = False) -> HttpResponse:
        """Issue a GET request.

        Args:
            url: Absolute URL to request
            stream: Defer body download until iter_content() is consumed

        Returns:
            Response object; the body is not validated yet
        """
        ...


@runtime_checkable
class CommandRunner(Protocol):
    """Subprocess capability used to drive the git client.

    Implementations raise CommandError when the program exits non-zero.
    """

    def run(self, program: str, args: Sequence[str], *, cwd: Path | None = None) -> None:
        """Run a command, discarding its output."""
        ...

    def run_capture(self, program: str, args: Sequence[str], *, cwd: Path | None = None) -> list[str]:
        """Run a command and return its standard output lines."""
        ...


class CrateSource(Protocol):
    """Contract shared by every crate source variant.

    Implementations:
    - CratesIOCrate: crates.io static download host
    - RegistryCrate: alternate registry located through its index repository
    - GitRepo: git repository cloned into the cache
    - LocalCrate: directory on the local filesystem
    """

    def fetch(self, workspace: "Workspace") -> None:
        """Populate the cache; no-op when the cache entry already exists."""
        ...

    def purge_from_cache(self, workspace: "Workspace") -> None:
        """Remove the cache entry; no-op when nothing is cached."""
        ...

    def copy_source_to(self, workspace: "Workspace", dest: Path) -> None:
        """Materialize the source into dest, which must not exist yet."""
        ...

    def __str__(self) -> str:
        """Human-readable description naming the origin and its parameters."""
        ...