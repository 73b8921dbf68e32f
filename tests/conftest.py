"""Shared fixtures: in-process HTTP client, scripted git runner, archive builders."""

import io
import shutil
import tarfile
from pathlib import Path

import pytest
import requests
from crate_sources import CommandError
from crate_sources import Workspace


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, body: bytes = b"", status: int = 200, interrupt: bool = False):
        self.body = body
        self.status = status
        self.interrupt = interrupt
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Error")

    def iter_content(self, chunk_size: int):
        yield self.body[: len(self.body) // 2 or None]
        if self.interrupt:
            raise requests.ConnectionError("connection reset by peer")
        if len(self.body) > 1:
            yield self.body[len(self.body) // 2 :]

    def close(self) -> None:
        self.closed = True


class FakeHttpClient:
    """Serves registered URLs; anything else is a 404."""

    def __init__(self):
        self.routes: dict[str, FakeResponse] = {}
        self.requests: list[str] = []
        self.responses: list[FakeResponse] = []

    def add(self, url: str, body: bytes = b"", status: int = 200, interrupt: bool = False) -> None:
        self.routes[url] = FakeResponse(body, status=status, interrupt=interrupt)

    def get(self, url: str, *, stream: bool = False) -> FakeResponse:
        self.requests.append(url)
        route = self.routes.get(url, FakeResponse(status=404))
        response = FakeResponse(route.body, status=route.status, interrupt=route.interrupt)
        self.responses.append(response)
        return response


class FakeGit:
    """Scripted git client implementing CommandRunner.

    clone creates the target (a HEAD file for --bare, otherwise the files of
    `worktree`), show returns `config`, rev-parse returns `commit`. Any
    operation listed in `failures` raises CommandError with the given stderr.
    """

    OPERATIONS = ("clone", "fetch", "show", "rev-parse")

    def __init__(self):
        self.calls: list[tuple[str, list[str], Path | None]] = []
        self.config = '{"dl": "https://dl.example.com/api/v1/crates"}'
        self.commit = "0123456789abcdef0123456789abcdef01234567"
        self.worktree: dict[str, str] = {"Cargo.toml": "[package]\nname = \"demo\"\n"}
        self.failures: dict[str, list[str]] = {}

    def operations(self) -> list[str]:
        return [self._operation(args) for _, args, _ in self.calls]

    def run(self, program, args, *, cwd=None) -> None:
        self._handle(program, args, cwd)

    def run_capture(self, program, args, *, cwd=None) -> list[str]:
        return self._handle(program, args, cwd)

    def _operation(self, args: list[str]) -> str:
        return next(arg for arg in args if arg in self.OPERATIONS)

    def _handle(self, program, args, cwd) -> list[str]:
        args = [str(arg) for arg in args]
        self.calls.append((program, args, cwd))
        operation = self._operation(args)

        if operation in self.failures:
            raise CommandError(
                f"git {operation} failed",
                context={"program": program, "args": args, "returncode": 128, "stderr": self.failures[operation]},
            )

        if operation == "clone":
            target = Path(args[-1])
            target.mkdir(parents=True)
            if "--bare" in args:
                (target / "HEAD").write_text("ref: refs/heads/master\n")
            else:
                (target / ".git").mkdir()
                for name, content in self.worktree.items():
                    (target / name).parent.mkdir(parents=True, exist_ok=True)
                    (target / name).write_text(content)
        elif operation == "show":
            return self.config.splitlines()
        elif operation == "rev-parse":
            return [self.commit]
        return []


def build_tarball(path: Path, entries: dict[str, bytes | None], links: dict[str, tuple[bytes, str]] | None = None) -> Path:
    """Write a .tar.gz with the given member names.

    A value of None creates a directory entry. `links` maps member names to
    (tarfile type, link target).
    """
    with tarfile.open(path, "w:gz") as tar:
        for name, content in entries.items():
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
        for name, (link_type, target) in (links or {}).items():
            info = tarfile.TarInfo(name)
            info.type = link_type
            info.linkname = target
            tar.addfile(info)
    return path


def build_crate(path: Path, files: dict[str, str], top: str = "rand-0.3.14") -> Path:
    """Write a crate archive wrapping `files` in a single top-level directory."""
    entries: dict[str, bytes | None] = {f"{top}/": None}
    entries.update({f"{top}/{name}": content.encode() for name, content in files.items()})
    return build_tarball(path, entries)


def build_crate_bytes(tmp_path: Path, files: dict[str, str], top: str = "rand-0.3.14") -> bytes:
    build_dir = tmp_path / "crate-build"
    build_dir.mkdir(exist_ok=True)
    archive = build_crate(build_dir / f"{top}.crate", files, top=top)
    data = archive.read_bytes()
    shutil.rmtree(build_dir)
    return data


@pytest.fixture
def make_tarball():
    return build_tarball


@pytest.fixture
def make_crate():
    return build_crate


@pytest.fixture
def crate_bytes(tmp_path):
    """Build crate archive bytes: crate_bytes(files, top=...)."""

    def build(files: dict[str, str], top: str = "rand-0.3.14") -> bytes:
        return build_crate_bytes(tmp_path, files, top=top)

    return build


@pytest.fixture
def http_client():
    return FakeHttpClient()


@pytest.fixture
def git():
    return FakeGit()


@pytest.fixture
def workspace(tmp_path, http_client, git):
    return Workspace(tmp_path / "cache", http_client=http_client, commands=git)
