"""
Path safety utilities for block inspection.

Object keys coming from the command line or from a bucket listing are mapped
onto local directories by the filesystem bucket; this module keeps them inside
the bucket root.
"""
from __future__ import annotations

from pathlib import PurePosixPath


def safe_key(key: str) -> str:
    """
    Validate an object key before it is used as a relative filesystem path.

    Rules:
    - No empty strings or "." (the bucket root itself is not an object)
    - No absolute keys (starting with '/')
    - No parent directory references ('..' components)
    - No backslashes

    Args:
        key: Object key

    Returns:
        Normalized key

    Raises:
        ValueError: If the key violates any rule

    Examples:
        >>> safe_key("01ABC/meta.json")
        '01ABC/meta.json'

        >>> safe_key("../etc/passwd")
        ValueError: unsafe object key: ../etc/passwd
    """
    rel = PurePosixPath(key)
    s = str(rel)
    if not key or s == ".":
        raise ValueError(f"unsafe object key: {key}")
    if "\\" in s:
        raise ValueError(f"unsafe object key: {key}")
    if rel.is_absolute() or ".." in rel.parts:
        raise ValueError(f"unsafe object key: {key}")
    return s
