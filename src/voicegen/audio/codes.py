"""
Audio code derivation.

A code is the first ``length`` hex characters of the MD5 digest of the
upstream URL. The same URL always yields the same code, across calls and
across processes, so concurrent flows that land on the same upstream file
converge on one cache entry.

Ten hex characters give 40 bits; birthday collisions become plausible
somewhere around 10^5-10^6 distinct URLs.
"""
from __future__ import annotations

import hashlib

from voicegen.core.config import Defaults


def derive_code(url: str, length: int = Defaults.CACHE_CODE_LENGTH) -> str:
    """
    Derive the opaque client-facing code for an upstream URL.

    Example:
        code = derive_code("https://tmpfiles.org/dl/123/voicegen.mp3")
        # 10 lowercase hex characters
    """
    digest = hashlib.md5(url.encode("utf-8")).hexdigest()
    return digest[:length]
