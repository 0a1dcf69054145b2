"""Utility functions for pynetlify."""

import hashlib
import os
import re
from pathlib import Path
from typing import BinaryIO, Union
from urllib.parse import quote

# =============================================================================
# Constants for deploy operations
# =============================================================================

# Chunk size used when streaming files through the hasher (64 KB)
DEFAULT_HASH_CHUNK_SIZE: int = 64 * 1024

# Polling policy while waiting for a deploy to be processed
DEFAULT_MAX_POLL_ATTEMPTS: int = 30
DEFAULT_POLL_INTERVAL: float = 2.0  # seconds

# Directory and file names never included in a deploy
DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset({".git", "node_modules", ".netlify"})
DEFAULT_IGNORE_FILES: frozenset[str] = frozenset({".DS_Store"})

_SHA1_PATTERN = re.compile(r"^[a-f0-9]{40}$", re.IGNORECASE)

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_stream_digest(
    stream: BinaryIO, chunk_size: int = DEFAULT_HASH_CHUNK_SIZE
) -> str:
    """Calculate the SHA-1 digest of a binary stream.

    The stream is consumed in chunks so that arbitrarily large inputs are
    never held in memory. The result does not depend on ``chunk_size``.

    Args:
        stream: Binary file-like object positioned at the start of the data
        chunk_size: Number of bytes read per iteration

    Returns:
        Lowercase hex digest (40 characters)

    Examples:
        >>> import io
        >>> calculate_stream_digest(io.BytesIO(b"hello"))
        'aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d'
    """
    digest = hashlib.sha1()
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        digest.update(chunk)
    return digest.hexdigest()


def calculate_file_digest(
    file_path: Union[str, Path], chunk_size: int = DEFAULT_HASH_CHUNK_SIZE
) -> str:
    """Calculate the SHA-1 digest of a file on disk.

    Args:
        file_path: Path to the file
        chunk_size: Number of bytes read per iteration

    Returns:
        Lowercase hex digest (40 characters)

    Raises:
        OSError: If the file cannot be opened or read
    """
    with open(file_path, "rb") as f:
        return calculate_stream_digest(f, chunk_size=chunk_size)


def is_sha1_digest(value: str) -> bool:
    """Check if a value has the shape of a SHA-1 hex digest.

    Examples:
        >>> is_sha1_digest("aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d")
        True
        >>> is_sha1_digest("/index.html")
        False
    """
    return bool(_SHA1_PATTERN.match(value))


# =============================================================================
# Path utilities
# =============================================================================


def normalize_deploy_path(relative_path: str) -> str:
    """Normalize a relative path to the form used in deploy manifests.

    OS separators are replaced with forward slashes and the result always
    starts with exactly one ``/``.

    Examples:
        >>> normalize_deploy_path("css/site.css")
        '/css/site.css'
        >>> normalize_deploy_path("/index.html")
        '/index.html'
    """
    normalized = relative_path.replace(os.sep, "/")
    if os.altsep:
        normalized = normalized.replace(os.altsep, "/")
    return "/" + normalized.lstrip("/")


def encode_deploy_path(deploy_path: str) -> str:
    """Percent-encode a manifest path for use in an upload URL.

    Every segment is encoded like ``encodeURIComponent``. Separators between
    segments are kept, while the leading slash of a normalized path is
    encoded so the endpoint never contains an empty segment.

    Examples:
        >>> encode_deploy_path("/index.html")
        '%2Findex.html'
        >>> encode_deploy_path("/assets/my file.png")
        '%2Fassets/my%20file.png'
    """
    prefix = ""
    if deploy_path.startswith("/"):
        prefix = quote("/", safe="")
        deploy_path = deploy_path[1:]
    segments = [
        quote(segment, safe=_URI_COMPONENT_SAFE) for segment in deploy_path.split("/")
    ]
    return prefix + "/".join(segments)

