"""Tests for crates.io crates."""

import pytest
from crate_sources import CratesIOCrate
from crate_sources import DownloadError
from crate_sources import UnpackError
from pydantic import ValidationError

RAND_URL = "https://static.crates.io/crates/rand/rand-0.3.14.crate"


@pytest.fixture
def rand():
    return CratesIOCrate(name="rand", version="0.3.14")


def test_cache_path_layout(rand, workspace):
    """Cache path follows <cache>/cratesio-sources/<name>/<name>-<version>.crate."""
    expected = workspace.cache_dir / "cratesio-sources" / "rand" / "rand-0.3.14.crate"
    assert rand.cache_path(workspace) == expected


def test_download_url(rand):
    assert rand.download_url() == RAND_URL


def test_fetch_downloads_once(rand, workspace, http_client, crate_bytes):
    """Second fetch is a pure existence check."""
    http_client.add(RAND_URL, crate_bytes({"Cargo.toml": "[package]\n"}))

    rand.fetch(workspace)
    rand.fetch(workspace)

    assert http_client.requests == [RAND_URL]
    assert rand.cache_path(workspace).is_file()


def test_fetch_failure_is_retried(rand, workspace, http_client, crate_bytes):
    """A failed download leaves no cache entry, so the next fetch tries again."""
    http_client.add(RAND_URL, status=503)

    with pytest.raises(DownloadError):
        rand.fetch(workspace)
    assert not rand.cache_path(workspace).exists()

    http_client.add(RAND_URL, crate_bytes({"Cargo.toml": "[package]\n"}))
    rand.fetch(workspace)

    assert http_client.requests == [RAND_URL, RAND_URL]
    assert rand.cache_path(workspace).is_file()


def test_purge_from_cache(rand, workspace):
    """Purge deletes the cached archive and is a no-op afterwards."""
    path = rand.cache_path(workspace)
    path.parent.mkdir(parents=True)
    path.write_bytes(b"cached")

    rand.purge_from_cache(workspace)
    assert not path.exists()

    rand.purge_from_cache(workspace)


def test_copy_source_to(rand, workspace, http_client, tmp_path, crate_bytes):
    """Extracted content lands at the destination root."""
    http_client.add(RAND_URL, crate_bytes({"Cargo.toml": "[package]\n", "src/lib.rs": "// rand\n"}))
    rand.fetch(workspace)
    dest = tmp_path / "build" / "source"

    rand.copy_source_to(workspace, dest)

    assert (dest / "Cargo.toml").read_text() == "[package]\n"
    assert (dest / "src" / "lib.rs").read_text() == "// rand\n"


def test_copy_source_to_before_fetch(rand, workspace, tmp_path):
    """Copying an unfetched crate fails with a file-not-found cause."""
    with pytest.raises(UnpackError, match="rand 0.3.14") as exc_info:
        rand.copy_source_to(workspace, tmp_path / "dest")

    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
    assert exc_info.value.context == {"name": "rand", "version": "0.3.14"}


def test_copy_source_to_corrupt_cache(rand, workspace, tmp_path):
    """Corrupt archives are reported with the crate name and leave no destination."""
    path = rand.cache_path(workspace)
    path.parent.mkdir(parents=True)
    path.write_bytes(b"definitely not gzip")
    dest = tmp_path / "dest"

    with pytest.raises(UnpackError, match="Failed to unpack rand 0.3.14"):
        rand.copy_source_to(workspace, dest)

    assert not dest.exists()


def test_display(rand):
    assert str(rand) == "crates.io crate rand 0.3.14"


@pytest.mark.parametrize(
    ("name", "version"),
    [("../../escaped", "1.0.0"), ("a/b", "1.0.0"), ("..", "1.0.0"), ("rand", "../../1.0"), ("rand", "0.3\\14")],
)
def test_path_escaping_identity_rejected(name, version):
    """Names and versions are single cache path components."""
    with pytest.raises(ValidationError):
        CratesIOCrate(name=name, version=version)
