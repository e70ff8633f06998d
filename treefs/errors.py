"""Exception types raised by the tree and the virtual filesystem.

Every error derives from :class:`TreeFSError` and, where one fits, from the
closest builtin exception as well, so callers can catch either
``treefs.TreeFSError`` or e.g. ``FileNotFoundError``.
"""

from __future__ import annotations


class TreeFSError(Exception):
    """Base class for all treefs errors."""


# -----------------------------------------------------------------------------
# Argument errors
# -----------------------------------------------------------------------------


class MissingArgumentError(TreeFSError, TypeError):
    """A required argument was not supplied."""

    def __init__(self, param: str):
        self.param = param
        super().__init__(f"Missing argument: {param}")


class InvalidNameError(TreeFSError, ValueError):
    """A node name is empty, reserved or contains a separator."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid name: '{name}'")


# -----------------------------------------------------------------------------
# Resolution errors
# -----------------------------------------------------------------------------


class PathNotFoundError(TreeFSError, FileNotFoundError):
    """A path segment matched no child."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path not found: {path}")


class AboveRootError(TreeFSError, ValueError):
    """A ``..`` segment tried to climb above the root directory."""

    def __init__(self) -> None:
        super().__init__("No more directories beyond root directory.")


# -----------------------------------------------------------------------------
# Invariant errors
# -----------------------------------------------------------------------------


class DuplicateRootError(TreeFSError, ValueError):
    """The tree already has a root and no parent was given."""

    def __init__(self) -> None:
        super().__init__("Tree already has a root. Please specify the node's parent.")


class NameTakenError(TreeFSError, FileExistsError):
    """A sibling already uses the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name already taken: {name}")


class NotADirError(TreeFSError, NotADirectoryError):
    """The operation needs a directory but got a file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a directory: {path}")


class NotAFileError(TreeFSError, IsADirectoryError):
    """The operation needs a file but got a directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a file: {path}")


class RootDeletionError(TreeFSError, PermissionError):
    """The root directory cannot be deleted or moved."""

    def __init__(self) -> None:
        super().__init__("You cannot delete the root directory.")


class RootRenameError(TreeFSError, PermissionError):
    """The root directory cannot be renamed."""

    def __init__(self) -> None:
        super().__init__("You cannot rename the root directory.")


class SubtreeCycleError(TreeFSError, ValueError):
    """The destination lies inside the subtree being copied or moved."""

    def __init__(self, target: str, destination: str):
        self.target = target
        self.destination = destination
        super().__init__(f"Cannot copy '{target}' into itself: '{destination}'")


# -----------------------------------------------------------------------------
# Not-found errors
# -----------------------------------------------------------------------------


class NodeNotFoundError(TreeFSError, LookupError):
    """Nothing in the tree matched the node or pattern."""

    def __init__(self, target: object = None):
        self.target = target
        super().__init__("Target node not found.")


class ParentNotFoundError(TreeFSError, LookupError):
    """The parent given to ``Tree.insert`` is not in the tree."""

    def __init__(self, parent: object = None):
        self.parent = parent
        super().__init__("Parent node not found.")


class NoSuchFileError(TreeFSError, FileNotFoundError):
    """A file read found no file with that name."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


# -----------------------------------------------------------------------------
# Capacity errors
# -----------------------------------------------------------------------------


class SizeLimitError(TreeFSError, OSError):
    """A write or copy would exceed the configured size limit."""

    def __init__(self, new_total: int, limit: int):
        self.new_total = new_total
        self.limit = limit
        super().__init__(
            f"VFS size limit exceeded: {new_total / 1024 / 1024:.1f}MB > "
            f"{limit / 1024 / 1024:.1f}MB"
        )
