"""
download.py
Stream a mod archive from a URL to disk.

The file name is taken from the last non-empty segment of the final
(post-redirect) URL path, falling back to "tmp.bin".
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

import requests

from Mods.errors import DownloadFailed

# Default chunk size for streaming downloads (256 KB)
_CHUNK_SIZE = 256 * 1024

_FALLBACK_NAME = "tmp.bin"

# Callback signature: (bytes_downloaded, total_bytes_or_zero)
ProgressCallback = Callable[[int, int], None]

# Signature every downloader passed to install_from_url must follow
Downloader = Callable[[str, Path], Path]


def file_name_from_url(url: str) -> str:
    segments = [s for s in urlparse(url).path.split("/") if s]
    if not segments:
        return _FALLBACK_NAME
    name = Path(unquote(segments[-1])).name
    return name or _FALLBACK_NAME


def download_mod(
    url: str,
    dest_dir: Path,
    progress_cb: ProgressCallback | None = None,
    timeout: float = 60,
) -> Path:
    """
    Download url into dest_dir and return the saved file's path.

    Raises DownloadFailed for connection errors and non-2xx responses.
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            dest = dest_dir / file_name_from_url(resp.url or url)
            total = int(resp.headers.get("Content-Length", 0) or 0)
            downloaded = 0
            with open(dest, "wb") as fh:
                for chunk in resp.iter_content(_CHUNK_SIZE):
                    fh.write(chunk)
                    downloaded += len(chunk)
                    if progress_cb:
                        progress_cb(downloaded, total)
    except requests.RequestException as exc:
        raise DownloadFailed(f"Could not download {url}! {exc}") from exc
    except OSError as exc:
        raise DownloadFailed(f"Could not save download from {url}! {exc}") from exc
    return dest
