"""Tree-backed virtual filesystem implementation.

Provides VirtualFilesystem, which layers directories, files, path
resolution and a current-directory cursor on top of :class:`Tree`.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .base import DirectoryData, FileData, NodeInfo, NodeKind, _now_iso
from .config import VirtualFSConfig
from .errors import (
    AboveRootError,
    InvalidNameError,
    MissingArgumentError,
    NameTakenError,
    NodeNotFoundError,
    NoSuchFileError,
    NotADirError,
    NotAFileError,
    PathNotFoundError,
    RootDeletionError,
    RootRenameError,
    SizeLimitError,
    SubtreeCycleError,
)
from .tree import Tree, TreeNode, levels

logger = logging.getLogger(__name__)

CAT_READ = ""
CAT_OVERWRITE = ">"
CAT_APPEND = ">>"
CAT_MODES = (CAT_READ, CAT_OVERWRITE, CAT_APPEND)


def is_dir(node: TreeNode) -> bool:
    """Check whether a tree node holds a directory."""
    return node.data.kind is NodeKind.DIRECTORY


def is_file(node: TreeNode) -> bool:
    """Check whether a tree node holds a file."""
    return node.data.kind is NodeKind.FILE


def _require(**params: object) -> None:
    for name, value in params.items():
        if value is None:
            raise MissingArgumentError(name)


def _check_name(name: str) -> None:
    if not name or name in (".", "..") or "/" in name:
        raise InvalidNameError(name)


def _copy_data(node: TreeNode) -> DirectoryData | FileData:
    data = node.data
    if is_file(node):
        return FileData(
            contents=data.contents,
            size=data.size,
            created_at=data.created_at,
            last_modified=data.last_modified,
        )
    return DirectoryData(created_at=data.created_at)


class VirtualFilesystem:
    """In-memory hierarchical filesystem with a current directory.

    Nodes live in a :class:`Tree` whose root is the directory ``/``.
    Relative paths resolve against the cursor (the current directory).
    Path segments may be glob patterns: an exact name wins, otherwise the
    first matching child is used.

    Every public command holds an instance-wide lock, so one instance may
    be shared between threads. Independent instances share nothing.

    Example:
        >>> fs = VirtualFilesystem()
        >>> docs = fs.mkdir("docs")
        >>> readme = fs.cat(">", "docs/readme.txt", "hello")
        >>> fs.cat("", "/docs/readme.txt")
        'hello'
        >>> [node.name for node in fs.whereis("*.txt")]
        ['readme.txt']
    """

    def __init__(
        self,
        encoding: str = "utf-8",
        max_size_mb: int | None = None,
        clock: Callable[[], str] | None = None,
    ):
        """Initialize an empty filesystem holding only the root directory.

        Args:
            encoding: Encoding used to measure file sizes in bytes.
            max_size_mb: Maximum total size of all files in megabytes.
                None means unlimited.
            clock: Returns the current timestamp as a string. Defaults to
                ISO 8601 UTC.
        """
        self._encoding = encoding
        self._max_size_bytes: int | None = (
            max_size_mb * 1024 * 1024 if max_size_mb is not None else None
        )
        self._clock = clock or _now_iso
        self._lock = threading.RLock()

        self.tree = Tree()
        self.tree.insert("", None, DirectoryData(created_at=self._clock()))
        self.pointer: TreeNode = self.root

    @classmethod
    def from_config(
        cls, config: VirtualFSConfig, clock: Callable[[], str] | None = None
    ) -> VirtualFilesystem:
        """Build a filesystem from a :class:`VirtualFSConfig`."""
        return cls(encoding=config.encoding, max_size_mb=config.max_size_mb, clock=clock)

    @property
    def root(self) -> TreeNode:
        assert self.tree.root is not None
        return self.tree.root

    # -------------------------------------------------------------------------
    # Directory commands
    # -------------------------------------------------------------------------

    def mkdir(self, path: str | None = None) -> TreeNode:
        """Create a directory.

        Args:
            path: Path of the new directory; all but the last segment must
                already exist.

        Returns:
            The new directory node.

        Raises:
            MissingArgumentError: If path is missing.
            NameTakenError: If the parent already has a child with that name.
            NotADirError: If the parent is a file.
        """
        _require(path=path)
        with self._lock:
            parent, name = self._resolve_parent(path)
            if self._child_named(parent, name) is not None:
                raise NameTakenError(name)
            node = self.tree.insert(name, parent, DirectoryData(created_at=self._clock()))
            logger.debug("mkdir %s", self.abspath(node))
            return node

    def rmdir(self, path: str | None = None) -> None:
        """Remove a directory and everything below it.

        If the current directory is inside the removed subtree, it moves to
        the removed directory's parent.

        Raises:
            MissingArgumentError: If path is missing.
            RootDeletionError: If path is the root.
            NotADirError: If path is a file.
        """
        _require(path=path)
        with self._lock:
            node = self._resolve_path(path)
            if node is self.root:
                raise RootDeletionError()
            if not is_dir(node):
                raise NotADirError(path)

            parent = node.parent
            cursor_inside = self.pointer.is_descendant_of(node)
            removed_path = self.abspath(node)
            self.tree.delete(node)
            logger.debug("rmdir %s", removed_path)

            if cursor_inside:
                assert parent is not None
                self.pointer = parent
                logger.info(
                    "Current directory %s was removed; moved to %s",
                    removed_path,
                    self.abspath(parent),
                )

    def cd(self, path: str | None = None) -> TreeNode:
        """Change the current directory.

        Returns:
            The new current directory node.

        Raises:
            MissingArgumentError: If path is missing.
            NotADirError: If path is a file.
        """
        _require(path=path)
        with self._lock:
            node = self._resolve_path(path)
            if not is_dir(node):
                raise NotADirError(path)
            self.pointer = node
            return node

    def ls(self, path: str | None = None) -> list[TreeNode]:
        """List the children of a directory (the current one by default).

        Raises:
            NotADirError: If path is a file.
        """
        with self._lock:
            node = self.pointer if path is None else self._resolve_path(path)
            if not is_dir(node):
                raise NotADirError(path if path is not None else self.abspath(node))
            return list(node.children)

    # -------------------------------------------------------------------------
    # File commands
    # -------------------------------------------------------------------------

    def cat(
        self,
        mode: str | None = None,
        path: str | None = None,
        contents: str | None = None,
    ) -> str | TreeNode:
        """Read, overwrite or append to a file.

        Args:
            mode: "" to read, ">" to overwrite, ">>" to append. Writing
                creates the file if it does not exist.
            path: File path; the parent directory must exist.
            contents: Text to write (write modes only).

        Returns:
            The file contents when reading, the file node when writing.

        Raises:
            MissingArgumentError: If a required argument is missing.
            ValueError: If mode is not one of "", ">", ">>".
            NotAFileError: If path names a directory.
            NoSuchFileError: If reading a file that doesn't exist.
            SizeLimitError: If the write would exceed max_size_mb.
        """
        _require(mode=mode, path=path)
        if mode not in CAT_MODES:
            raise ValueError(f"Invalid mode: {mode!r}")
        if mode != CAT_READ:
            _require(contents=contents)
            if not isinstance(contents, str):
                raise TypeError(f"Expected str, got {type(contents).__name__}")

        with self._lock:
            if mode == CAT_READ and path.rstrip("/").rpartition("/")[2] in ("", ".", ".."):
                # "/", "." and ".." always name a directory.
                raise NotAFileError(self.abspath(self._resolve_path(path)))

            parent, name = self._resolve_parent(path, check_name=mode != CAT_READ)
            # Reads accept a pattern like any path segment; writes use the exact name.
            node = self._child_named(parent, name)
            if node is None and mode == CAT_READ:
                node = next(iter(parent.find(name)), None)
            if node is not None and not is_file(node):
                raise NotAFileError(path)

            if mode == CAT_READ:
                if node is None:
                    raise NoSuchFileError(path)
                return node.data.contents

            existing = node.data.contents if node is not None else ""
            new_contents = contents if mode == CAT_OVERWRITE else existing + contents
            new_size = self._byte_size(new_contents)
            self._check_size_limit(new_size - (node.data.size if node is not None else 0))

            now = self._clock()
            if node is None:
                node = self.tree.insert(name, parent, FileData(created_at=now))
                logger.debug("Created file %s", self.abspath(node))
            node.data.contents = new_contents
            node.data.size = new_size
            node.data.last_modified = now
            return node

    def rm(self, path: str | None = None) -> None:
        """Remove a file.

        Raises:
            MissingArgumentError: If path is missing.
            NotAFileError: If path is a directory.
        """
        _require(path=path)
        with self._lock:
            node = self._resolve_path(path)
            if not is_file(node):
                raise NotAFileError(path)
            self.tree.delete(node)
            logger.debug("rm %s", path)

    def rn(self, path: str | None = None, name: str | None = None) -> TreeNode:
        """Rename a file or directory in place.

        A file and a directory may share a name; two siblings of the same
        kind may not.

        Raises:
            MissingArgumentError: If path or name is missing.
            RootRenameError: If path is the root.
            NameTakenError: If a sibling of the same kind has that name.
        """
        _require(path=path, name=name)
        _check_name(name)
        with self._lock:
            node = self._resolve_path(path)
            if node is self.root:
                raise RootRenameError()
            assert node.parent is not None
            for sibling in node.parent.children:
                if (
                    sibling is not node
                    and sibling.name == name
                    and sibling.data.kind is node.data.kind
                ):
                    raise NameTakenError(name)
            logger.debug("rn %s -> %s", self.abspath(node), name)
            node.name = name
            return node

    # -------------------------------------------------------------------------
    # Copy and move
    # -------------------------------------------------------------------------

    def cp(
        self,
        target: str | TreeNode | None = None,
        destination: str | TreeNode | None = None,
    ) -> TreeNode:
        """Copy a file or directory tree into a directory.

        Args:
            target: Path or node to copy.
            destination: Path or node of the directory receiving the copy.

        Returns:
            Root of the new copy.

        Raises:
            MissingArgumentError: If an argument is missing.
            NotADirError: If destination is a file.
            NodeNotFoundError: If a node argument is not in this tree.
            SubtreeCycleError: If destination is inside target.
            SizeLimitError: If the copy would exceed max_size_mb.
        """
        _require(target=target, destination=destination)
        with self._lock:
            source, dest = self._resolve_pair(target, destination)
            self._check_size_limit(self._subtree_size(source))
            copy = self._copy(source, dest)
            logger.debug("cp %s -> %s", self.abspath(source), self.abspath(copy))
            return copy

    def mv(
        self,
        target: str | TreeNode | None = None,
        destination: str | TreeNode | None = None,
    ) -> TreeNode:
        """Move a file or directory tree into a directory.

        The target is deleted, then re-created under destination. If the
        current directory was inside the moved subtree, it follows the copy.

        Returns:
            Root of the re-created subtree.

        Raises:
            MissingArgumentError: If an argument is missing.
            RootDeletionError: If target is the root.
            NotADirError: If destination is a file.
            NodeNotFoundError: If a node argument is not in this tree.
            SubtreeCycleError: If destination is inside target.
        """
        _require(target=target, destination=destination)
        with self._lock:
            if self._as_node(target) is self.root:
                raise RootDeletionError()
            source, dest = self._resolve_pair(target, destination)

            route = self._route(source, self.pointer)
            old_path = self.abspath(source)
            self.tree.delete(source)
            moved = self._copy(source, dest)
            logger.debug("mv %s -> %s", old_path, self.abspath(moved))

            if route is not None:
                cursor = moved
                for index in route:
                    cursor = cursor.children[index]
                self.pointer = cursor
                logger.info("Current directory followed move to %s", self.abspath(cursor))
            return moved

    def _copy(self, source: TreeNode, destination: TreeNode) -> TreeNode:
        """Re-create the subtree at source as a new child of destination."""
        copy = None
        stack = [(source, destination)]
        while stack:
            node, parent = stack.pop()
            new = self.tree.insert(node.name, parent, _copy_data(node))
            if copy is None:
                copy = new
            stack.extend((child, new) for child in reversed(node.children))
        assert copy is not None
        return copy

    def _as_node(self, arg: str | TreeNode) -> TreeNode:
        if not isinstance(arg, TreeNode):
            return self._resolve_path(arg)
        if arg not in self.tree:
            raise NodeNotFoundError(arg)
        return arg

    def _resolve_pair(
        self, target: str | TreeNode, destination: str | TreeNode
    ) -> tuple[TreeNode, TreeNode]:
        source = self._as_node(target)
        dest = self._as_node(destination)
        if not is_dir(dest):
            raise NotADirError(self.abspath(dest))
        if dest.is_descendant_of(source):
            raise SubtreeCycleError(self.abspath(source), self.abspath(dest))
        return source, dest

    @staticmethod
    def _route(ancestor: TreeNode, node: TreeNode) -> list[int] | None:
        """Child indices leading from ancestor down to node, or None."""
        route: list[int] = []
        while node is not ancestor:
            if node.parent is None:
                return None
            route.append(next(i for i, c in enumerate(node.parent.children) if c is node))
            node = node.parent
        route.reverse()
        return route

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def whereis(self, query: str | None = None) -> list[TreeNode]:
        """Find every node in the tree whose name matches a glob pattern."""
        _require(query=query)
        with self._lock:
            return self.tree.search(query)

    def getcwd(self) -> str:
        """Get the absolute path of the current directory."""
        with self._lock:
            return self.abspath(self.pointer)

    pwd = getcwd

    def exists(self, path: str) -> bool:
        """Check if path resolves to a node."""
        return self._lookup(path) is not None

    def isdir(self, path: str) -> bool:
        """Check if path resolves to a directory."""
        node = self._lookup(path)
        return node is not None and is_dir(node)

    def isfile(self, path: str) -> bool:
        """Check if path resolves to a file."""
        node = self._lookup(path)
        return node is not None and is_file(node)

    def _lookup(self, path: str) -> TreeNode | None:
        with self._lock:
            try:
                return self._resolve_path(path)
            except (AboveRootError, PathNotFoundError):
                return None

    def stat(self, path: str) -> NodeInfo:
        """Get display information for a file or directory.

        Example:
            >>> info = fs.stat("notes.txt")
            >>> print(f"{info.name}: {info.size} bytes, modified {info.modified_at}")
        """
        with self._lock:
            return self.info(self._resolve_path(path))

    def info(self, node: TreeNode) -> NodeInfo:
        """Build a NodeInfo for an already resolved node."""
        with self._lock:
            data = node.data
            if is_file(node):
                size, modified_at = data.size, data.last_modified
            else:
                size, modified_at = 0, data.created_at
            return NodeInfo(
                name=node.name,
                path=self.abspath(node),
                kind=data.kind,
                size=size,
                created_at=data.created_at,
                modified_at=modified_at,
            )

    def tree_levels(self, path: str | None = None) -> list[list[TreeNode]]:
        """Group the subtree at path (the current directory by default) by depth."""
        with self._lock:
            node = self.pointer if path is None else self._resolve_path(path)
            if node is self.root:
                return self.tree.traverse()
            return levels(node)

    def total_size(self) -> int:
        """Get the total size of all files in bytes."""
        with self._lock:
            return self._subtree_size(self.root)

    # -------------------------------------------------------------------------
    # Path resolution
    # -------------------------------------------------------------------------

    def abspath(self, node: TreeNode) -> str:
        """Return the absolute path of a node ("/" for the root)."""
        names = []
        with self._lock:
            while node.parent is not None:
                names.append(node.name)
                node = node.parent
        return "/" + "/".join(reversed(names))

    def _resolve_path(self, path: str) -> TreeNode:
        """Resolve a path (absolute or relative to the cursor) to a node.

        Raises:
            AboveRootError: If ".." climbs above the root.
            PathNotFoundError: If a segment matches no child.
        """
        absolute = path.startswith("/")
        node = self.root if absolute else self.pointer
        segments = path.rstrip("/").split("/")

        for i, segment in enumerate(segments):
            if segment in ("", "."):
                continue
            if segment == "..":
                if node.parent is None:
                    raise AboveRootError()
                node = node.parent
                continue
            child = self._child_named(node, segment)
            if child is None:
                matches = node.find(segment)
                if not matches:
                    raise PathNotFoundError("/".join(segments[: i + 1]) or "/")
                child = matches[0]
            node = child
        return node

    def _resolve_parent(self, path: str, check_name: bool = True) -> tuple[TreeNode, str]:
        """Resolve all but the last segment; return (parent, last segment)."""
        head, sep, name = path.rstrip("/").rpartition("/")
        if check_name:
            _check_name(name)
        if sep and not head:
            head = "/"
        parent = self._resolve_path(head)
        if not is_dir(parent):
            raise NotADirError(head)
        return parent, name

    @staticmethod
    def _child_named(parent: TreeNode, name: str) -> TreeNode | None:
        for child in parent.children:
            if child.name == name:
                return child
        return None

    # -------------------------------------------------------------------------
    # Size accounting
    # -------------------------------------------------------------------------

    def _byte_size(self, contents: str) -> int:
        return len(contents.encode(self._encoding))

    def _subtree_size(self, node: TreeNode) -> int:
        return sum(n.data.size for n in node.walk() if is_file(n))

    def _check_size_limit(self, added: int) -> None:
        """Check that adding ``added`` bytes stays within max_size_mb.

        Raises:
            SizeLimitError: If the new total would exceed the limit.
        """
        if self._max_size_bytes is None or added <= 0:
            return
        new_total = self.total_size() + added
        if new_total > self._max_size_bytes:
            raise SizeLimitError(new_total, self._max_size_bytes)
