"""Streaming downloads into the cache.

The body lands in a sibling ``.part`` file that is renamed onto the final
path only once the transfer completed, so an interrupted download never
looks like a cache hit.
"""

import logging
import os
from pathlib import Path

import requests

from .exceptions import DownloadError
from .protocols import HttpClient

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def partial_path(dest: Path) -> Path:
    """Temporary path a download is streamed to before it is published."""
    return dest.with_name(dest.name + ".part")


def download_to(http_client: HttpClient, url: str, dest: Path) -> None:
    """Download url into dest.

    Args:
        http_client: Injected HTTP capability
        url: Absolute URL to fetch
        dest: Final file path (its parent directory must exist)

    Raises:
        DownloadError: Transport failure or non-success HTTP status
        OSError: Writing the cache file failed
    """
    tmp = partial_path(dest)
    logger.debug(f"Downloading {url} to {dest}")

    try:
        response = http_client.get(url, stream=True)
        try:
            response.raise_for_status()
            with open(tmp, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
        finally:
            response.close()
    except requests.RequestException as e:
        tmp.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}", context={"url": url}) from e
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    os.replace(tmp, dest)
    logger.debug(f"Saved {dest}")
