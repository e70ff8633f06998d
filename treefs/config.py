"""Configuration for the virtual filesystem.

Provides the configuration dataclass and the connect_fs factory function.
"""

import codecs
from dataclasses import dataclass
from typing import Literal


@dataclass
class VirtualFSConfig:
    """Configuration for the in-memory tree filesystem.

    Attributes:
        type: Always "virtual".
        encoding: Encoding used to measure file sizes in bytes.
        max_size_mb: Maximum total size of all files in megabytes.
            None means unlimited.
    """

    type: Literal["virtual"] = "virtual"
    encoding: str = "utf-8"
    max_size_mb: int | None = None


def connect_fs(
    type: Literal["virtual"] = "virtual",
    **kwargs,
) -> VirtualFSConfig:
    """Configure a virtual filesystem.

    Args:
        type: FileSystem type. Only "virtual" is supported.
        **kwargs: Additional configuration:
            - encoding (str): Optional. Encoding for size accounting.
            - max_size_mb (int): Optional. Total size limit.

    Returns:
        VirtualFSConfig for initialization.

    Examples:
        >>> connect_fs(max_size_mb=10)
        VirtualFSConfig(type='virtual', encoding='utf-8', max_size_mb=10)
    """
    if type != "virtual":
        raise ValueError(f"Unsupported filesystem type: {type}. Use 'virtual'.")

    encoding = kwargs.pop("encoding", "utf-8")
    max_size_mb = kwargs.pop("max_size_mb", None)
    if kwargs:
        raise ValueError(f"Unexpected arguments for virtual fs: {list(kwargs.keys())}")

    codecs.lookup(encoding)  # LookupError for unknown codecs
    if max_size_mb is not None and max_size_mb < 0:
        raise ValueError(f"max_size_mb must be non-negative, got {max_size_mb}")

    return VirtualFSConfig(type=type, encoding=encoding, max_size_mb=max_size_mb)
