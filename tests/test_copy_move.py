"""Tests for VirtualFilesystem.cp() and mv()."""

import pytest

from treefs import (
    MissingArgumentError,
    NodeKind,
    NodeNotFoundError,
    NotADirError,
    PathNotFoundError,
    RootDeletionError,
    SubtreeCycleError,
    VirtualFilesystem,
)


def names(nodes):
    return [node.name for node in nodes]


def snapshot(node):
    """Nested (name, kind, contents, children) tuples for structural comparison."""
    data = node.data
    contents = data.contents if data.kind is NodeKind.FILE else None
    return (node.name, data.kind, contents, [snapshot(c) for c in node.children])


def build_project(fs):
    fs.mkdir("src")
    fs.mkdir("src/pkg")
    fs.cat(">", "src/pkg/__init__.py", "")
    fs.cat(">", "src/pkg/core.py", "def run(): pass")
    fs.cat(">", "src/README", "docs")
    fs.mkdir("backup")


class TestCp:
    """Test VirtualFilesystem.cp()."""

    def test_copy_file(self):
        """Copying a file preserves contents, size and timestamps."""
        fs = VirtualFilesystem()
        original = fs.cat(">", "f.txt", "hello")
        fs.mkdir("dest")

        copy = fs.cp("f.txt", "dest")

        assert copy is not original
        assert copy.parent.name == "dest"
        assert fs.cat("", "dest/f.txt") == "hello"
        assert copy.data.size == original.data.size
        assert copy.data.created_at == original.data.created_at
        assert copy.data.last_modified == original.data.last_modified
        assert copy.data is not original.data

    def test_copy_directory_recursively(self):
        """A directory copy reproduces the whole subtree."""
        fs = VirtualFilesystem()
        build_project(fs)
        source = fs.cd("/src")
        fs.cd("/")

        copy = fs.cp("src", "backup")

        assert snapshot(copy) == snapshot(source)
        assert fs.cat("", "/backup/src/pkg/core.py") == "def run(): pass"

    def test_copy_leaves_source_untouched(self):
        """The source subtree is unchanged by the copy."""
        fs = VirtualFilesystem()
        build_project(fs)
        before = snapshot(fs.cd("/src"))
        fs.cd("/")

        copy = fs.cp("/src", "/backup")
        copy.children[0].name = "renamed"
        fs.cat(">>", "/backup/src/README", " changed")

        assert snapshot(fs.cd("/src")) == before

    def test_copy_is_independent(self):
        """Writes to the copy don't reach the original."""
        fs = VirtualFilesystem()
        fs.cat(">", "f.txt", "hello")
        fs.mkdir("dest")
        fs.cp("f.txt", "dest")

        fs.cat(">", "dest/f.txt", "changed")

        assert fs.cat("", "f.txt") == "hello"

    def test_copy_allows_duplicate_names(self):
        """Copying next to an existing name keeps both."""
        fs = VirtualFilesystem()
        fs.cat(">", "f.txt", "hello")

        fs.cp("f.txt", "/")

        assert names(fs.ls()) == ["f.txt", "f.txt"]

    def test_copy_accepts_nodes(self):
        """Targets and destinations may be resolved nodes."""
        fs = VirtualFilesystem()
        target = fs.cat(">", "f.txt", "hello")
        dest = fs.mkdir("dest")

        copy = fs.cp(target, dest)

        assert copy.parent is dest

    def test_copy_into_file_raises(self):
        """The destination must be a directory."""
        fs = VirtualFilesystem()
        fs.cat(">", "f.txt", "hello")
        fs.cat(">", "g.txt", "world")

        with pytest.raises(NotADirError):
            fs.cp("f.txt", "g.txt")

    def test_copy_into_itself_raises(self):
        """A directory cannot be copied into its own subtree."""
        fs = VirtualFilesystem()
        build_project(fs)
        before = snapshot(fs.root)

        with pytest.raises(SubtreeCycleError):
            fs.cp("src", "src/pkg")
        with pytest.raises(SubtreeCycleError):
            fs.cp("src", "src")

        assert snapshot(fs.root) == before

    def test_copy_missing_target(self):
        """Resolver errors propagate."""
        fs = VirtualFilesystem()

        with pytest.raises(PathNotFoundError):
            fs.cp("ghost", "/")

    def test_copy_missing_arguments(self):
        """Both arguments are required."""
        fs = VirtualFilesystem()

        with pytest.raises(MissingArgumentError, match="target"):
            fs.cp()
        with pytest.raises(MissingArgumentError, match="destination"):
            fs.cp("f.txt")


class TestMv:
    """Test VirtualFilesystem.mv()."""

    def test_move_file(self):
        """A moved file disappears from the source and appears at the destination."""
        fs = VirtualFilesystem()
        fs.cat(">", "f.txt", "hello")
        fs.mkdir("dest")

        moved = fs.mv("f.txt", "dest")

        assert names(fs.ls()) == ["dest"]
        assert moved.parent.name == "dest"
        assert fs.cat("", "dest/f.txt") == "hello"

    def test_move_directory(self):
        """Moving a directory carries its subtree."""
        fs = VirtualFilesystem()
        build_project(fs)
        before = snapshot(fs.cd("/src"))
        fs.cd("/")

        moved = fs.mv("src", "backup")

        assert snapshot(moved) == before
        assert fs.exists("/src") is False
        assert fs.abspath(moved) == "/backup/src"

    def test_move_equals_copy_then_delete(self):
        """mv leaves the same tree as cp followed by deleting the original."""
        moved_fs = VirtualFilesystem()
        copied_fs = VirtualFilesystem()
        build_project(moved_fs)
        build_project(copied_fs)

        moved_fs.mv("src", "backup")
        copied_fs.cp("src", "backup")
        copied_fs.rmdir("src")

        assert snapshot(moved_fs.root) == snapshot(copied_fs.root)

    def test_move_to_same_parent_goes_last(self):
        """Moving within the same directory re-appends the node."""
        fs = VirtualFilesystem()
        fs.cat(">", "a.txt", "a")
        fs.cat(">", "b.txt", "b")

        fs.mv("a.txt", ".")

        assert names(fs.ls()) == ["b.txt", "a.txt"]

    def test_move_root_raises(self):
        """The root cannot be moved."""
        fs = VirtualFilesystem()
        fs.mkdir("a")

        with pytest.raises(RootDeletionError):
            fs.mv("/", "a")

        assert fs.tree.root is fs.root

    def test_move_into_itself_raises(self):
        """A directory cannot be moved into its own subtree."""
        fs = VirtualFilesystem()
        build_project(fs)
        before = snapshot(fs.root)

        with pytest.raises(SubtreeCycleError):
            fs.mv("src", "src/pkg")

        assert snapshot(fs.root) == before

    def test_move_into_file_raises(self):
        """A failed move leaves the target in place."""
        fs = VirtualFilesystem()
        fs.cat(">", "f.txt", "hello")
        fs.cat(">", "g.txt", "world")

        with pytest.raises(NotADirError):
            fs.mv("f.txt", "g.txt")

        assert names(fs.ls()) == ["f.txt", "g.txt"]

    def test_cursor_follows_moved_directory(self):
        """A cursor inside the moved subtree follows the copy."""
        fs = VirtualFilesystem()
        build_project(fs)
        fs.cd("/src/pkg")

        fs.mv("/src", "/backup")

        assert fs.getcwd() == "/backup/src/pkg"
        assert fs.pointer in fs.tree
        assert names(fs.ls()) == ["__init__.py", "core.py"]

    def test_cursor_elsewhere_stays(self):
        """Moving an unrelated subtree leaves the cursor alone."""
        fs = VirtualFilesystem()
        build_project(fs)
        cwd = fs.cd("/backup")

        fs.mv("/src", "/backup")

        assert fs.pointer is cwd

    def test_move_missing_arguments(self):
        """Both arguments are required."""
        fs = VirtualFilesystem()

        with pytest.raises(MissingArgumentError, match="target"):
            fs.mv()
        with pytest.raises(MissingArgumentError, match="destination"):
            fs.mv("f.txt")


class TestDetachedNodes:
    """Node arguments must belong to the filesystem's tree."""

    def test_move_into_removed_directory(self):
        """Moving into a removed directory fails and keeps the file."""
        fs = VirtualFilesystem()
        gone = fs.mkdir("gone")
        fs.cat(">", "keep.txt", "data")
        fs.rmdir("gone")

        with pytest.raises(NodeNotFoundError):
            fs.mv("keep.txt", gone)

        assert fs.cat("", "keep.txt") == "data"

    def test_move_into_other_filesystem(self):
        """Another instance's root is not a valid destination."""
        fs = VirtualFilesystem()
        other = VirtualFilesystem()
        fs.cat(">", "keep.txt", "data")

        with pytest.raises(NodeNotFoundError):
            fs.mv("keep.txt", other.root)

        assert fs.cat("", "keep.txt") == "data"
        assert other.ls("/") == []

    def test_copy_removed_node(self):
        """A removed node cannot be copied back in."""
        fs = VirtualFilesystem()
        ghost = fs.cat(">", "ghost.txt", "boo")
        fs.rm("ghost.txt")

        with pytest.raises(NodeNotFoundError):
            fs.cp(ghost, "/")

        assert fs.ls("/") == []

    def test_move_removed_node(self):
        """A removed node cannot be moved."""
        fs = VirtualFilesystem()
        fs.mkdir("dest")
        ghost = fs.mkdir("ghost")
        fs.rmdir("ghost")

        with pytest.raises(NodeNotFoundError):
            fs.mv(ghost, "dest")

        assert fs.ls("dest") == []


def failing_calls(fs):
    ghost = fs.mkdir("ghost")
    fs.rmdir("ghost")
    return [
        (fs.cp, "/src/README", "/src/README", NotADirError),
        (fs.mv, "/src/README", "/src/README", NotADirError),
        (fs.cp, "/src", "/src", SubtreeCycleError),
        (fs.mv, "/src", "/src", SubtreeCycleError),
        (fs.mv, "/src", "/src/pkg", SubtreeCycleError),
        (fs.cp, "/src", ghost, NodeNotFoundError),
        (fs.mv, "/src", ghost, NodeNotFoundError),
        (fs.mv, ghost, "/backup", NodeNotFoundError),
        (fs.cp, "/missing", "/backup", PathNotFoundError),
        (fs.mv, "/missing", "/backup", PathNotFoundError),
        (fs.mv, "/src", "/missing", PathNotFoundError),
        (fs.mv, "/", "/backup", RootDeletionError),
    ]


class TestFailuresLeaveTreeUnchanged:
    """A failed cp or mv changes neither the tree nor the cursor."""

    def test_failed_calls(self):
        """Every failing cp/mv leaves levels and cwd as they were."""
        fs = VirtualFilesystem()
        build_project(fs)
        fs.cd("/src/pkg")

        for command, target, destination, error in failing_calls(fs):
            before = [[n.name for n in level] for level in fs.tree.traverse()]
            tree = snapshot(fs.root)
            cwd = fs.getcwd()

            with pytest.raises(error):
                command(target, destination)

            assert [[n.name for n in level] for level in fs.tree.traverse()] == before
            assert fs.getcwd() == cwd
            assert snapshot(fs.root) == tree


class TestDeepTrees:
    """Copying trees deeper than the interpreter's recursion limit."""

    def test_copy_deep_tree(self):
        """cp handles a very deep chain of directories."""
        fs = VirtualFilesystem()
        fs.mkdir("backup")
        fs.mkdir("d")
        fs.cd("d")
        for _ in range(1199):
            fs.mkdir("d")
            fs.cd("d")
        fs.cat(">", "leaf.txt", "bottom")
        fs.cd("/")

        copy = fs.cp("/d", "/backup")

        assert copy.parent.name == "backup"
        assert len(fs.whereis("d")) == 2400
        assert [n.name for n in fs.whereis("leaf.txt")] == ["leaf.txt", "leaf.txt"]
        assert fs.whereis("leaf.txt")[1].data.contents == "bottom"


if __name__ == "__main__":
    pytest.main([__file__])
