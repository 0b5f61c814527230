"""Filesystem-safe encoding of resource paths within an export package."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote, unquote, urlsplit

from importexport.exceptions import PathEncodingError

BINARY_EXTENSION = ".binary"

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

PathLike = Union[str, Path]


def encode_path(path: str) -> str:
    """
    Encode the path portion of a URI for use in file names.

    Characters such as ":" are percent-encoded, "/" separators are kept so
    the hierarchy survives on disk. Reversed by decode_path.
    """
    return quote(path, safe="").replace("%2F", "/")


def decode_path(encoded: str) -> str:
    """
    Decode a path produced by encode_path.

    Raises:
        PathEncodingError: If the input has a malformed escape or does not
            decode to valid UTF-8
    """
    match = _MALFORMED_ESCAPE.search(encoded)
    if match:
        raise PathEncodingError(encoded, f"bad escape at offset {match.start()}")
    try:
        return unquote(encoded, errors="strict")
    except UnicodeDecodeError as e:
        raise PathEncodingError(encoded, str(e)) from e


def _relative(uri: str) -> str:
    # URI paths arrive percent-encoded; encode the decoded form once
    return encode_path(unquote(urlsplit(uri).path)).lstrip("/")


def file_for_binary(uri: str, binary_root: Optional[PathLike]) -> Optional[Path]:
    """File where the binary resource at uri is stored, or None without a binary root."""
    if binary_root is None:
        return None
    return Path(binary_root, _relative(uri) + BINARY_EXTENSION)


def file_for_container(uri: str, metadata_root: PathLike, extension: str) -> Path:
    """File where the metadata for the resource at uri is stored."""
    return Path(metadata_root, _relative(uri) + extension)


def directory_for_container(uri: str, metadata_root: PathLike) -> Path:
    """Directory holding the metadata of resources contained by the resource at uri."""
    return Path(metadata_root, _relative(uri))
