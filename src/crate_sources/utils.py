"""Path helpers shared by the cache layouts."""

import logging
import shutil
from pathlib import Path
from typing import Annotated
from urllib.parse import quote

from pydantic import AfterValidator
from pydantic import Field

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    """Replace every non-alphanumeric character with "-".

    Used to turn a registry index URL into a single directory name. Distinct
    URLs collide only when they differ solely in punctuation at the same
    positions (e.g. "https://a.b/c" and "https://a-b/c").

    Examples:
        >>> slugify("https://github.com/rust-lang/crates.io-index")
        'https---github-com-rust-lang-crates-io-index'
    """
    return "".join(c if c.isalnum() else "-" for c in value)


def escape_path(value: str) -> str:
    """Percent-escape value into a collision-free single path component.

    Examples:
        >>> escape_path("https://example.com/repo")
        'https%3A%2F%2Fexample.com%2Frepo'
    """
    return quote(value, safe="")


def check_path_component(value: str) -> str:
    """Reject values that would not stay a single directory entry.

    Crate names and versions are joined into cache paths, so separators and
    the "." and ".." entries are refused.

    Raises:
        ValueError: value contains a path separator or is "." or ".."
    """
    if "/" in value or "\\" in value:
        raise ValueError(f"must not contain a path separator: {value!r}")
    if value in (".", ".."):
        raise ValueError(f"must not be a relative path entry: {value!r}")
    return value


# Non-empty string usable as one component of a cache path
PathComponent = Annotated[str, Field(min_length=1), AfterValidator(check_path_component)]


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def remove_quietly(path: Path) -> None:
    """Best-effort removal; a failure is logged and otherwise ignored."""
    try:
        if path.exists() or path.is_symlink():
            remove_path(path)
    except OSError as e:
        logger.debug(f"Could not remove {path}: {e}")
