"""Line-oriented shell over a VirtualFilesystem.

Maps text commands such as ``mkdir docs`` or ``cat > notes.txt hello`` to
filesystem calls, renders the results as text and reports failures as
``error: ...`` lines instead of raising.
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from typing import Callable, TextIO

from .config import connect_fs
from .errors import TreeFSError
from .tree import TreeNode
from .virtual import CAT_APPEND, CAT_OVERWRITE, CAT_READ, VirtualFilesystem, is_dir

logger = logging.getLogger(__name__)


class ExitShell(Exception):
    """Raised by the ``exit`` command to stop the interactive loop."""


class Shell:
    """Command dispatcher for a single filesystem instance."""

    def __init__(self, fs: VirtualFilesystem | None = None):
        self.fs = fs if fs is not None else VirtualFilesystem()
        self.commands: dict[str, Callable[[list[str]], str]] = {
            "mkdir": self.cmd_mkdir,
            "rmdir": self.cmd_rmdir,
            "cd": self.cmd_cd,
            "pwd": self.cmd_pwd,
            "ls": self.cmd_ls,
            "cat": self.cmd_cat,
            "rm": self.cmd_rm,
            "rn": self.cmd_rn,
            "cp": self.cmd_cp,
            "mv": self.cmd_mv,
            "whereis": self.cmd_whereis,
            "stat": self.cmd_stat,
            "tree": self.cmd_tree,
            "help": self.cmd_help,
            "exit": self.cmd_exit,
        }

    def get_prompt(self) -> str:
        return f"treefs:{self.fs.getcwd()}$ "

    def execute(self, line: str) -> str:
        """Run one command line and return its output text."""
        try:
            args = shlex.split(line)
        except ValueError as e:
            return f"error: {e}"
        if not args:
            return ""

        command, args = args[0], args[1:]
        handler = self.commands.get(command)
        if handler is None:
            return f"error: unknown command '{command}'"
        try:
            return handler(args)
        except TreeFSError as e:
            logger.debug("%s failed: %s", command, e)
            return f"error: {e}"

    def run(self, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
        """Read commands until end of input or ``exit``."""
        interactive = stdin.isatty()
        while True:
            if interactive:
                stdout.write(self.get_prompt())
                stdout.flush()
            line = stdin.readline()
            if not line:
                break
            try:
                output = self.execute(line)
            except ExitShell:
                break
            if output:
                stdout.write(output + "\n")

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _label(self, node: TreeNode) -> str:
        if node is self.fs.root:
            return "/"
        return node.name + "/" if is_dir(node) else node.name

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    @staticmethod
    def _arg(args: list[str], index: int) -> str | None:
        return args[index] if len(args) > index else None

    def cmd_mkdir(self, args: list[str]) -> str:
        self.fs.mkdir(self._arg(args, 0))
        return ""

    def cmd_rmdir(self, args: list[str]) -> str:
        self.fs.rmdir(self._arg(args, 0))
        return ""

    def cmd_cd(self, args: list[str]) -> str:
        self.fs.cd(self._arg(args, 0) or "/")
        return ""

    def cmd_pwd(self, args: list[str]) -> str:
        return self.fs.getcwd()

    def cmd_ls(self, args: list[str]) -> str:
        return "\n".join(self._label(node) for node in self.fs.ls(self._arg(args, 0)))

    def cmd_cat(self, args: list[str]) -> str:
        """cat FILE | cat > FILE TEXT... | cat >> FILE TEXT..."""
        if args and args[0] in (CAT_OVERWRITE, CAT_APPEND):
            mode, rest = args[0], args[1:]
            contents = " ".join(rest[1:]) if len(rest) > 1 else None
            self.fs.cat(mode, self._arg(rest, 0), contents)
            return ""
        return self.fs.cat(CAT_READ, self._arg(args, 0))

    def cmd_rm(self, args: list[str]) -> str:
        self.fs.rm(self._arg(args, 0))
        return ""

    def cmd_rn(self, args: list[str]) -> str:
        self.fs.rn(self._arg(args, 0), self._arg(args, 1))
        return ""

    def cmd_cp(self, args: list[str]) -> str:
        self.fs.cp(self._arg(args, 0), self._arg(args, 1))
        return ""

    def cmd_mv(self, args: list[str]) -> str:
        self.fs.mv(self._arg(args, 0), self._arg(args, 1))
        return ""

    def cmd_whereis(self, args: list[str]) -> str:
        return "\n".join(self.fs.abspath(node) for node in self.fs.whereis(self._arg(args, 0)))

    def cmd_stat(self, args: list[str]) -> str:
        info = self.fs.stat(self._arg(args, 0) or ".")
        return (
            f"{info.path}  {info.kind.value}  {info.size} bytes  "
            f"created {info.created_at}  modified {info.modified_at}"
        )

    def cmd_tree(self, args: list[str]) -> str:
        lines = []
        for depth, level in enumerate(self.fs.tree_levels(self._arg(args, 0))):
            lines.append(f"{depth}: " + " ".join(self._label(node) for node in level))
        return "\n".join(lines)

    def cmd_help(self, args: list[str]) -> str:
        return "commands: " + " ".join(sorted(self.commands))

    def cmd_exit(self, args: list[str]) -> str:
        raise ExitShell()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``treefs`` console script."""
    parser = argparse.ArgumentParser(prog="treefs", description="In-memory filesystem shell")
    parser.add_argument(
        "-c",
        "--command",
        action="append",
        default=[],
        help="Run a command and exit (may be repeated)",
    )
    parser.add_argument("--max-size-mb", type=int, default=None, help="Total size limit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    shell = Shell(VirtualFilesystem.from_config(connect_fs(max_size_mb=args.max_size_mb)))
    if not args.command:
        shell.run()
        return 0

    status = 0
    for line in args.command:
        try:
            output = shell.execute(line)
        except ExitShell:
            break
        if output.startswith("error: "):
            status = 1
        if output:
            print(output)
    return status


if __name__ == "__main__":
    sys.exit(main())
