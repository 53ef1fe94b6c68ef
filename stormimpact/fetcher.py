"""
Fetcher (remote file -> local cache)
====================================

Downloads the compressed storm dataset once and reuses the local copy on every
later run.

Key ideas:
- Presence of the destination file is treated as "already downloaded"
  (no checksum, no re-validation).
- The body is streamed to `<dest>.part` and renamed when complete, so an
  interrupted download never looks like a cached file.
- Any network or filesystem error propagates and aborts the run. No retries.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

import requests

log = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def ensure_download(url: str, dest: Union[str, Path], *, timeout: Optional[float] = None) -> Path:
    """Make sure `dest` exists locally, downloading `url` only if it is absent.

    Returns the destination path.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    if dest.exists():
        log.info("Using cached file %s", dest)
        return dest

    log.info("Downloading %s -> %s", url, dest)
    part = dest.with_name(dest.name + ".part")
    with requests.get(url, stream=True, timeout=timeout) as r:
        r.raise_for_status()
        with open(part, "wb") as f:
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
    part.replace(dest)
    log.info("Saved %s (%s bytes)", dest, f"{dest.stat().st_size:,}")
    return dest
