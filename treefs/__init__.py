"""treefs: In-memory hierarchical filesystem built on an ordered tree."""

from .base import DirectoryData, FileData, NodeInfo, NodeKind
from .config import VirtualFSConfig, connect_fs
from .errors import (
    AboveRootError,
    DuplicateRootError,
    InvalidNameError,
    MissingArgumentError,
    NameTakenError,
    NodeNotFoundError,
    NoSuchFileError,
    NotADirError,
    NotAFileError,
    ParentNotFoundError,
    PathNotFoundError,
    RootDeletionError,
    RootRenameError,
    SizeLimitError,
    SubtreeCycleError,
    TreeFSError,
)
from .shell import Shell
from .tree import Tree, TreeNode
from .virtual import VirtualFilesystem

__all__ = [
    "AboveRootError",
    "connect_fs",
    "DirectoryData",
    "DuplicateRootError",
    "FileData",
    "InvalidNameError",
    "MissingArgumentError",
    "NameTakenError",
    "NodeInfo",
    "NodeKind",
    "NodeNotFoundError",
    "NoSuchFileError",
    "NotADirError",
    "NotAFileError",
    "ParentNotFoundError",
    "PathNotFoundError",
    "RootDeletionError",
    "RootRenameError",
    "Shell",
    "SizeLimitError",
    "SubtreeCycleError",
    "Tree",
    "TreeFSError",
    "TreeNode",
    "VirtualFilesystem",
    "VirtualFSConfig",
]
