"""Application state and key handling for the library browser."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from arduino_tui.cli import LibraryInfo

WELCOME_MESSAGE = (
    "Press '?' for help, '/' to search, 'i' to install, 'u' to uninstall, 'q' to quit"
)
LOADING_INSTALLED = "Loading installed libraries..."

KEY_UP = "up"
KEY_DOWN = "down"
KEY_ENTER = "enter"
KEY_ESC = "esc"
KEY_BACKSPACE = "backspace"


class AppMode(enum.Enum):
    NORMAL = "normal"
    SEARCH = "search"
    HELP = "help"


class CommandKind(enum.Enum):
    LIST_INSTALLED = "list_installed"
    SEARCH = "search"
    INSTALL = "install"
    UNINSTALL = "uninstall"
    QUIT = "quit"


@dataclass(frozen=True)
class Command:
    """Work the application asks its runner to do."""

    kind: CommandKind
    argument: str = ""


@dataclass
class App:
    """State of the browser: mode, search text, libraries and status line.

    Keys are one-character strings for printable characters, or one of
    ``up``, ``down``, ``enter``, ``esc`` and ``backspace``.
    """

    mode: AppMode = AppMode.NORMAL
    search_input: str = ""
    libraries: list[LibraryInfo] = field(default_factory=list)
    selected: int | None = None
    status_message: str = WELCOME_MESSAGE
    is_loading: bool = True

    def selected_library(self) -> LibraryInfo | None:
        """The library under the cursor, if there is one."""
        if self.selected is None or not 0 <= self.selected < len(self.libraries):
            return None
        return self.libraries[self.selected]

    def next(self) -> None:
        """Move the cursor down, wrapping to the top."""
        last = max(len(self.libraries) - 1, 0)
        if self.selected is None or self.selected >= last:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self) -> None:
        """Move the cursor up, wrapping to the bottom."""
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = max(len(self.libraries) - 1, 0)
        else:
            self.selected -= 1

    def handle_key(self, key: str) -> Command | None:
        """Apply a key press and return any command it starts."""
        if self.mode is AppMode.NORMAL:
            return self._normal_key(key)
        if self.mode is AppMode.SEARCH:
            return self._search_key(key)
        if key in (KEY_ESC, "q", "?", "h"):
            self.mode = AppMode.NORMAL
        return None

    def _normal_key(self, key: str) -> Command | None:
        if key == "q":
            return Command(CommandKind.QUIT)
        if key in ("j", KEY_DOWN):
            self.next()
        elif key in ("k", KEY_UP):
            self.previous()
        elif key in ("?", "h"):
            self.mode = AppMode.HELP
        elif key == "/":
            self.mode = AppMode.SEARCH
        elif key == KEY_ESC:
            return self._clear_search()
        elif key in ("i", "u"):
            library = self.selected_library()
            if library is not None:
                kind = CommandKind.INSTALL if key == "i" else CommandKind.UNINSTALL
                return self.start_command(Command(kind, library.name))
        return None

    def _search_key(self, key: str) -> Command | None:
        if key == KEY_ENTER:
            self.mode = AppMode.NORMAL
            query = self.search_input
            if query:
                return self.start_command(Command(CommandKind.SEARCH, query))
            return self.start_command(Command(CommandKind.LIST_INSTALLED))
        if key == KEY_BACKSPACE:
            self.search_input = self.search_input[:-1]
        elif key == KEY_ESC:
            self.mode = AppMode.NORMAL
            return self._clear_search()
        elif len(key) == 1:
            self.search_input += key
        return None

    def _clear_search(self) -> Command | None:
        if not self.search_input:
            return None
        self.search_input = ""
        return self.start_command(Command(CommandKind.LIST_INSTALLED))

    def start_command(self, command: Command) -> Command:
        """Show that *command* is under way and hand it back."""
        messages = {
            CommandKind.LIST_INSTALLED: LOADING_INSTALLED,
            CommandKind.SEARCH: f"Searching for '{command.argument}'...",
            CommandKind.INSTALL: f"Installing {command.argument}...",
            CommandKind.UNINSTALL: f"Uninstalling {command.argument}...",
        }
        if command.kind in messages:
            self.status_message = messages[command.kind]
            self.is_loading = True
        return command

    def _find(self, name: str) -> LibraryInfo | None:
        return next((lib for lib in self.libraries if lib.name == name), None)

    def libraries_loaded(self, libraries: list[LibraryInfo]) -> None:
        """Replace the shown libraries with *libraries*."""
        self.libraries = list(libraries)
        self.selected = 0 if self.libraries else None
        self.is_loading = False
        self.status_message = f"Found {len(self.libraries)} libraries."

    def library_installed(self, name: str) -> None:
        self.is_loading = False
        self.status_message = f"Successfully installed {name}."
        library = self._find(name)
        if library is not None:
            library.is_installed = True

    def library_uninstalled(self, name: str) -> None:
        self.is_loading = False
        self.status_message = f"Successfully uninstalled {name}."
        library = self._find(name)
        if library is not None:
            library.is_installed = False

    def command_error(self, message: str) -> None:
        self.is_loading = False
        self.status_message = f"Error: {message}"