"""Interactive explorer shell."""

import logging
from pathlib import PurePosixPath
from typing import Callable

import click

from gh import GitHubContent

from .explorer import RepositoryExplorer
from .formatting import join_path
from .outline import MarkdownOutline, render_outline
from .render import (
    render_banner,
    render_branches,
    render_file,
    render_listing,
    render_token_warning,
    render_tree,
)

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"quit", "exit", "q"}

HELP = """\
Commands:
  ls                    list current directory
  cd <entry|path|..|/>  change directory
  open <entry|path>     open a file (or directory)
  back                  go to parent directory
  crumb <n>             jump to the n-th breadcrumb
  home                  go to repository root
  branches              list branches
  branch <name>         switch branch
  tree                  show the file tree
  expand <path>         expand a directory in the tree
  collapse <path>       collapse a directory in the tree
  cat                   show the selected file
  outline               outline of the selected Markdown file
  edit                  edit the selected file and commit
  new <path>            create a file and commit
  reload                refetch directory and selected file
  help                  show this help
  quit                  leave"""


class ExplorerShell:
    """Read-eval-print loop over a RepositoryExplorer."""

    def __init__(
        self,
        explorer: RepositoryExplorer,
        editor: Callable[..., str | None] | None = None,
    ):
        self.explorer = explorer
        self.editor = editor or click.edit
        self.commands: dict[str, Callable[[str], bool]] = {
            "ls": self.do_ls,
            "cd": self.do_cd,
            "open": self.do_open,
            "back": self.do_back,
            "crumb": self.do_crumb,
            "home": self.do_home,
            "branches": self.do_branches,
            "branch": self.do_branch,
            "tree": self.do_tree,
            "expand": self.do_expand,
            "collapse": self.do_collapse,
            "cat": self.do_cat,
            "outline": self.do_outline,
            "edit": self.do_edit,
            "new": self.do_new,
            "reload": self.do_reload,
            "help": self.do_help,
        }

    def echo(self, lines: list[str]) -> None:
        for line in lines:
            click.echo(line)

    def prompt_text(self) -> str:
        return f"{self.explorer.full_name}:/{self.explorer.current_path}"

    def run(self, path: str = "") -> None:
        """Show ``path`` (a directory or a file), then read commands until quit."""
        path = path.strip("/")
        self.echo(render_token_warning(self.explorer))
        if self.explorer.explore(path):
            self._show_target(path)
        else:
            self.echo(render_banner(self.explorer.error))

        while True:
            try:
                line = click.prompt(
                    self.prompt_text(), default="", show_default=False, prompt_suffix="> "
                )
            except click.Abort:
                click.echo()
                break
            if not self.execute(line):
                break

    def execute(self, line: str) -> bool:
        """Run one command line; returns False when the shell should stop."""
        command, _, arg = line.strip().partition(" ")
        arg = arg.strip()
        if not command:
            return True
        if command in QUIT_COMMANDS:
            return False

        handler = self.commands.get(command)
        if handler is None:
            click.echo(f"Unknown command: {command} (try 'help')")
            return True

        logger.debug("Shell command: %s %s", command, arg)
        if not handler(arg):
            self.echo(render_banner(self.explorer.error))
        return True

    # ============ Helpers ============

    def _entry(self, arg: str) -> GitHubContent | None:
        """Listing entry addressed by 1-based index or name."""
        files = self.explorer.files
        if arg.isdigit():
            index = int(arg) - 1
            return files[index] if 0 <= index < len(files) else None
        for item in files:
            if item.name == arg:
                return item
        return None

    def _warn(self) -> None:
        if self.explorer.error:
            self.echo(render_banner(self.explorer.error))

    def _resolve(self, arg: str) -> str:
        entry = self._entry(arg)
        if entry is not None:
            return entry.path
        return join_path(self.explorer.current_path, arg)

    def _require(self, arg: str, usage: str) -> bool:
        if not arg:
            self.explorer.error = f"Usage: {usage}"
            return False
        return True

    def _show_target(self, path: str) -> None:
        node = self.explorer.tree.find(path)
        if node is not None and not node.item.is_dir:
            self.echo(render_file(self.explorer.selected_file))
        else:
            self.echo(render_listing(self.explorer))

    # ============ Navigation ============

    def do_ls(self, arg: str) -> bool:
        self.echo(render_listing(self.explorer))
        return True

    def do_cd(self, arg: str) -> bool:
        if arg in ("", "/"):
            return self.do_home(arg)
        if arg == "..":
            return self.do_back(arg)
        path = self._resolve(arg)
        if not self.explorer.explore(path):
            return False
        self._show_target(path)
        return True

    def do_open(self, arg: str) -> bool:
        if not self._require(arg, "open <entry|path>"):
            return False
        return self.do_cd(arg)

    def do_back(self, arg: str) -> bool:
        if not self.explorer.go_back():
            return False
        self.echo(render_listing(self.explorer))
        return True

    def do_crumb(self, arg: str) -> bool:
        if not arg.isdigit():
            self.explorer.error = "Usage: crumb <n>"
            return False
        if not self.explorer.click_breadcrumb(int(arg) - 1):
            return False
        self.echo(render_listing(self.explorer))
        return True

    def do_home(self, arg: str) -> bool:
        if not self.explorer.go_home():
            return False
        self.echo(render_listing(self.explorer))
        return True

    def do_reload(self, arg: str) -> bool:
        if not self.explorer.reload():
            return False
        self.echo(render_listing(self.explorer))
        return True

    # ============ Branches ============

    def do_branches(self, arg: str) -> bool:
        if not self.explorer.load_branches():
            return False
        self.echo(render_branches(self.explorer.branches, self.explorer.branch))
        return True

    def do_branch(self, arg: str) -> bool:
        if not self._require(arg, "branch <name>"):
            return False
        if not self.explorer.switch_branch(arg):
            return False
        click.echo(f"Switched to {arg}")
        self.echo(render_listing(self.explorer))
        return True

    # ============ Tree ============

    def do_tree(self, arg: str) -> bool:
        if not self.explorer.load_tree():
            return False
        self.echo(render_tree(self.explorer.tree))
        return True

    def do_expand(self, arg: str) -> bool:
        if not self._require(arg, "expand <path>"):
            return False
        if not self.explorer.expand(self._resolve(arg)):
            return False
        self.echo(render_tree(self.explorer.tree))
        return True

    def do_collapse(self, arg: str) -> bool:
        if not self._require(arg, "collapse <path>"):
            return False
        if not self.explorer.collapse(self._resolve(arg)):
            return False
        self.echo(render_tree(self.explorer.tree))
        return True

    # ============ Files ============

    def do_cat(self, arg: str) -> bool:
        self.echo(render_file(self.explorer.selected_file))
        return True

    def do_outline(self, arg: str) -> bool:
        snapshot = self.explorer.selected_file
        if snapshot is None:
            self.explorer.error = "No file selected"
            return False
        self.echo(render_outline(MarkdownOutline().parse(snapshot.content)))
        return True

    def do_edit(self, arg: str) -> bool:
        snapshot = self.explorer.selected_file
        if snapshot is None:
            self.explorer.error = "No file selected"
            return False
        if snapshot.binary:
            self.explorer.error = f"Cannot edit binary file: {snapshot.path}"
            return False

        text = self.editor(snapshot.content, extension=PurePosixPath(snapshot.name).suffix or ".txt")
        if text is None or text == snapshot.content:
            click.echo("No changes.")
            return True

        message = click.prompt("Commit message", default=f"Update {snapshot.path}")
        if not self.explorer.save_file(text, message):
            return False
        click.echo(f"Saved {snapshot.path} ({self.explorer.selected_file.sha[:7]})")
        self._warn()
        return True

    def do_new(self, arg: str) -> bool:
        if not self._require(arg, "new <path>"):
            return False
        path = join_path(self.explorer.current_path, arg)
        text = self.editor("", extension=PurePosixPath(path).suffix or ".txt")
        if text is None:
            click.echo("Aborted.")
            return True

        message = click.prompt("Commit message", default=f"Create {path}")
        if not self.explorer.create_file(path, text, message):
            return False
        click.echo(f"Created {path}")
        self._warn()
        return True

    def do_help(self, arg: str) -> bool:
        click.echo(HELP)
        return True
