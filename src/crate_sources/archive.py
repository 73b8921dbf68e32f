"""Crate archive extraction.

Crate archives are gzip-compressed tarballs wrapping everything in a single
``<name>-<version>/`` directory. Extraction drops that first component so the
package content lands directly in the destination.

Entries go through the tarfile ``data`` filter, which rejects absolute paths,
parent-directory traversal, links pointing outside the destination and
device nodes.
"""

import copy
import logging
import tarfile
import zlib
from pathlib import Path
from pathlib import PurePosixPath

from .utils import remove_quietly

logger = logging.getLogger(__name__)


def strip_first_component(name: str) -> str:
    """Drop the leading path component of an archive member name.

    Examples:
        >>> strip_first_component("rand-0.3.14/src/lib.rs")
        'src/lib.rs'
        >>> strip_first_component("rand-0.3.14/")
        ''
    """
    parts = PurePosixPath(name).parts
    return str(PurePosixPath(*parts[1:])) if len(parts) > 1 else ""


def unpack(src: Path, dest: Path) -> None:
    """Extract the tarball at src into dest without its top-level directory.

    If anything fails once extraction started, dest is removed before the
    error propagates, so a partially extracted tree is never left behind.
    The removal is best-effort and its own failure is not reported.

    Args:
        src: Path to a .crate (gzip-compressed tar) file
        dest: Destination directory (may or may not exist)

    Raises:
        FileNotFoundError: src does not exist (dest is left untouched)
        tarfile.TarError: Corrupt archive or unsafe entry
        EOFError: Truncated gzip stream
        OSError: Writing an entry failed
    """
    logger.debug(f"Unpacking {src} into {dest}")
    with open(src, "rb") as f:
        try:
            with tarfile.open(fileobj=f, mode="r:gz") as tar:
                _unpack_without_first_dir(tar, dest)
        except Exception:
            remove_quietly(dest)
            raise


def _unpack_without_first_dir(tar: tarfile.TarFile, dest: Path) -> None:
    dest.mkdir(parents=True, exist_ok=True)

    for member in tar:
        relpath = strip_first_component(member.name)
        if not relpath:
            # The wrapping directory itself maps onto dest
            if not member.isdir():
                raise tarfile.ExtractError(f"Archive entry {member.name!r} is outside the top-level directory")
            continue

        entry = copy.copy(member)
        entry.name = relpath
        if entry.islnk():
            entry.linkname = strip_first_component(entry.linkname)

        # extract() creates missing parent directories
        tar.extract(entry, dest, filter="data")


# Failures unpack() can surface: I/O, truncated or corrupt gzip, bad tar data
UNPACK_ERRORS = (OSError, EOFError, zlib.error, tarfile.TarError)
