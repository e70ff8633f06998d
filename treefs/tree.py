"""Generic ordered multi-way tree.

The tree knows nothing about files or directories: each node has a name,
a parent, an ordered list of children and an opaque ``data`` payload.
Names are matched with glob patterns where ``*`` matches any run of
characters and everything else is literal.
"""

from __future__ import annotations

import functools
import logging
import re
from collections import deque
from typing import Any, Iterator

from .errors import (
    DuplicateRootError,
    MissingArgumentError,
    NodeNotFoundError,
    ParentNotFoundError,
)

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Convert a glob pattern into an anchored regular expression.

    Example:
        >>> compile_pattern("*.txt").fullmatch("notes.txt") is not None
        True
    """
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def match_name(name: str, pattern: str) -> bool:
    """Check whether a node name matches a glob pattern."""
    return compile_pattern(pattern).fullmatch(name) is not None


class TreeNode:
    """A single tree entry.

    Attributes:
        name: Node name, matched against glob patterns.
        parent: Owning node, or None for the root and detached nodes.
        children: Owned child nodes in insertion order.
        data: Opaque payload attached at construction.
    """

    def __init__(self, name: str, data: Any = None):
        self.name = name
        self.parent: TreeNode | None = None
        self.children: list[TreeNode] = []
        self.data = data

    def __repr__(self) -> str:
        return f"TreeNode(name={self.name!r}, children={len(self.children)})"

    def add_child(self, child: TreeNode) -> None:
        self.children.append(child)
        child.parent = self

    def remove_child(self, child: TreeNode) -> None:
        # Identity, not equality: siblings may share a name after cp.
        for i, existing in enumerate(self.children):
            if existing is child:
                del self.children[i]
                child.parent = None
                return
        raise NodeNotFoundError(child)

    def find(self, pattern: str) -> list[TreeNode]:
        """Return direct children whose name matches ``pattern``."""
        regex = compile_pattern(pattern)
        return [child for child in self.children if regex.fullmatch(child.name)]

    def search(self, pattern: str) -> list[TreeNode]:
        """Return this node and every descendant matching ``pattern``.

        Self is tested before the children; results keep depth-first order.
        """
        regex = compile_pattern(pattern)
        return [node for node in self.walk() if regex.fullmatch(node.name)]

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and its descendants, depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def is_descendant_of(self, other: TreeNode) -> bool:
        """Check whether ``other`` is this node or one of its ancestors."""
        node: TreeNode | None = self
        while node is not None:
            if node is other:
                return True
            node = node.parent
        return False


class Tree:
    """Ordered multi-way tree with a single root.

    Example:
        >>> tree = Tree()
        >>> root = tree.insert("")
        >>> tree.insert("a", root).name
        'a'
        >>> [[n.name for n in level] for level in tree.traverse()]
        [[''], ['a']]
    """

    def __init__(self) -> None:
        self.root: TreeNode | None = None

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())

    def __contains__(self, node: object) -> bool:
        if not isinstance(node, TreeNode) or self.root is None:
            return False
        return node.is_descendant_of(self.root)

    def insert(
        self,
        name: str,
        parent: TreeNode | str | None = None,
        data: Any = None,
    ) -> TreeNode:
        """Create a node under ``parent``, or as the root.

        Args:
            name: Name of the new node.
            parent: Parent node, a glob pattern naming it (first match wins),
                or None to create the root.
            data: Payload stored on the node.

        Returns:
            The new node.

        Raises:
            MissingArgumentError: If ``name`` is None.
            DuplicateRootError: If no parent is given and a root exists.
            ParentNotFoundError: If the parent is not in this tree.
        """
        if name is None:
            raise MissingArgumentError("name")

        if parent is None:
            if self.root is not None:
                raise DuplicateRootError()
            self.root = TreeNode(name, data)
            logger.debug("Created root node %r", name)
            return self.root

        if isinstance(parent, TreeNode):
            if parent not in self:
                raise ParentNotFoundError(parent)
            owner = parent
        else:
            matches = self.search(parent)
            if not matches:
                raise ParentNotFoundError(parent)
            owner = matches[0]

        node = TreeNode(name, data)
        owner.add_child(node)
        return node

    def delete(self, target: TreeNode | str) -> list[TreeNode]:
        """Remove node(s) and their subtrees from the tree.

        Args:
            target: A node, or a glob pattern selecting every matching node.

        Returns:
            The detached subtree roots.

        Raises:
            MissingArgumentError: If ``target`` is None.
            NodeNotFoundError: If nothing matches.
        """
        if target is None:
            raise MissingArgumentError("node")

        if isinstance(target, TreeNode):
            if target not in self:
                raise NodeNotFoundError(target)
            targets = [target]
        else:
            targets = self.search(target)
            if not targets:
                raise NodeNotFoundError(target)

        removed = []
        for node in targets:
            # Already gone with an earlier match's subtree.
            if node not in self:
                continue
            if node is self.root:
                self.root = None
            else:
                assert node.parent is not None
                node.parent.remove_child(node)
            removed.append(node)
        return removed

    def search(self, pattern: str) -> list[TreeNode]:
        """Return every node matching ``pattern``, depth-first from the root."""
        if pattern is None or self.root is None:
            return []
        return self.root.search(pattern)

    def traverse(self) -> list[list[TreeNode]]:
        """Return the nodes grouped by breadth-first level (level 0 = root)."""
        if self.root is None:
            return []
        return levels(self.root)

    def walk(self) -> Iterator[TreeNode]:
        """Yield every node, depth-first pre-order."""
        if self.root is not None:
            yield from self.root.walk()


def levels(start: TreeNode) -> list[list[TreeNode]]:
    """Group ``start`` and its descendants by breadth-first depth."""
    result: list[list[TreeNode]] = []
    queue: deque[tuple[TreeNode, int]] = deque([(start, 0)])
    while queue:
        node, depth = queue.popleft()
        if depth == len(result):
            result.append([])
        result[depth].append(node)
        queue.extend((child, depth + 1) for child in node.children)
    return result
