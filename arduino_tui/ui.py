"""Terminal interface: layout, rendering and the main event loop."""

from __future__ import annotations

import argparse
import asyncio
import curses
import textwrap
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from arduino_tui.app import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESC,
    KEY_UP,
    App,
    AppMode,
    Command,
    CommandKind,
)
from arduino_tui.cli import (
    CliError,
    install_library,
    list_installed_libraries,
    search_libraries,
    uninstall_library,
)

# A rendered line is a sequence of (text, style) segments.  Styles are
# "", "bold", "green" and "dim".
Segment = tuple[str, str]
Line = tuple[Segment, ...]

_HIGHLIGHT_SYMBOL = ">> "
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class Rect:
    """A rectangle of terminal cells."""

    x: int
    y: int
    width: int
    height: int


def _inner(rect: Rect) -> Rect:
    return Rect(
        rect.x + 1, rect.y + 1, max(rect.width - 2, 0), max(rect.height - 2, 0)
    )


def _centre_span(start: int, size: int, percent: int) -> tuple[int, int]:
    pad = (100 - percent) // 2
    offset = min((size * pad + 50) // 100, size)
    length = min((size * percent + 50) // 100, size - offset)
    return start + offset, length


def centered_rect(percent_x: int, percent_y: int, rect: Rect) -> Rect:
    """A rectangle centred in *rect*, taking the given percentages of it."""
    x, width = _centre_span(rect.x, rect.width, percent_x)
    y, height = _centre_span(rect.y, rect.height, percent_y)
    return Rect(x, y, width, height)


def split_screen(rect: Rect) -> tuple[Rect, Rect, Rect, Rect]:
    """Split the screen into search box, library list, details pane and status box."""
    search_height = min(3, rect.height)
    status_height = min(3, rect.height - search_height)
    middle_height = rect.height - search_height - status_height
    search = Rect(rect.x, rect.y, rect.width, search_height)
    middle_y = rect.y + search_height
    status = Rect(rect.x, middle_y + middle_height, rect.width, status_height)
    left_width = (rect.width * 40 + 50) // 100
    libraries = Rect(rect.x, middle_y, left_width, middle_height)
    details = Rect(rect.x + left_width, middle_y, rect.width - left_width, middle_height)
    return search, libraries, details, status


def search_title(mode: AppMode) -> str:
    """Title of the search box for *mode*."""
    if mode is AppMode.SEARCH:
        return " Search (Press Enter to search, Esc to cancel) "
    if mode is AppMode.NORMAL:
        return " Search (Press '/' to search) "
    return "(Press 'esc' to go back) "


def library_rows(app: App) -> list[Line]:
    """One line per library: install marker and name."""
    return [
        (
            ("[I] ", "green") if library.is_installed else ("[ ] ", "dim"),
            (library.name, ""),
        )
        for library in app.libraries
    ]


def details_lines(app: App) -> list[Line]:
    """Lines of the details pane for the selected library."""
    library = app.selected_library()
    if library is None:
        return [(("No library selected", ""),)]
    lines: list[Line] = [
        (("Name: ", "bold"), (library.name, "")),
        (("Version: ", "bold"), (library.version, "")),
    ]
    if library.author is not None:
        lines.append((("Author: ", "bold"), (library.author, "")))
    if library.category is not None:
        lines.append((("Category: ", "bold"), (library.category, "")))
    if library.sentence is not None:
        lines.append((("", ""),))
        lines.append((("Description:", "bold"),))
        lines.append(((library.sentence, ""),))
    lines.append((("", ""),))
    if library.is_installed:
        lines.append((("Status: Installed", "green"),))
    else:
        lines.append((("Status: Not Installed", "dim"),))
    return lines


def help_lines() -> list[Line]:
    """Lines of the help popup."""
    plain = [
        ("Navigation", "bold"),
        ("  j / Down   : Move down", ""),
        ("  k / Up     : Move up", ""),
        ("", ""),
        ("Actions", "bold"),
        ("  /          : Search for a library", ""),
        ("  i          : Install selected library", ""),
        ("  u          : Uninstall selected library", ""),
        ("", ""),
        ("General", "bold"),
        ("  ? / h      : Toggle this help menu", ""),
        ("  q          : Quit application", ""),
    ]
    return [(segment,) for segment in plain]


_NAMED_CODES = {
    curses.KEY_UP: KEY_UP,
    curses.KEY_DOWN: KEY_DOWN,
    curses.KEY_ENTER: KEY_ENTER,
    curses.KEY_BACKSPACE: KEY_BACKSPACE,
}

_NAMED_CHARS = {
    "\n": KEY_ENTER,
    "\r": KEY_ENTER,
    "\x1b": KEY_ESC,
    "\x7f": KEY_BACKSPACE,
    "\b": KEY_BACKSPACE,
}


def translate_key(code: int | str) -> str | None:
    """Turn a curses key (code or character) into a key name the app understands."""
    if isinstance(code, int):
        if code >= 256:
            return _NAMED_CODES.get(code)
        code = chr(code)
    if code in _NAMED_CHARS:
        return _NAMED_CHARS[code]
    if len(code) == 1 and code.isprintable():
        return code
    return None


async def run_command(command: Command) -> Callable[[App], None]:
    """Carry out *command* and return a function that applies its outcome to an app."""
    argument = command.argument
    try:
        if command.kind is CommandKind.LIST_INSTALLED:
            libraries = await list_installed_libraries()
            return lambda app: app.libraries_loaded(libraries)
        if command.kind is CommandKind.SEARCH:
            if argument:
                libraries = await search_libraries(argument)
            else:
                libraries = await list_installed_libraries()
            return lambda app: app.libraries_loaded(libraries)
        if command.kind is CommandKind.INSTALL:
            await install_library(argument)
            return lambda app: app.library_installed(argument)
        if command.kind is CommandKind.UNINSTALL:
            await uninstall_library(argument)
            return lambda app: app.library_uninstalled(argument)
    except CliError as exc:
        message = str(exc)
        return lambda app: app.command_error(message)
    raise ValueError(f"cannot run command {command.kind.name}")


_WHITESPACE = str.maketrans({"\t": " ", "\n": " ", "\r": " ", "\v": " ", "\f": " "})


def _wrap_offsets(text: str, width: int) -> list[tuple[int, int]]:
    """Start and end offsets of the wrapped pieces of *text*."""
    if not text.strip():
        return [(0, 0)]
    pieces = textwrap.wrap(
        text, width, expand_tabs=False, replace_whitespace=False, break_on_hyphens=False
    )
    offsets = []
    position = 0
    for piece in pieces:
        start = text.find(piece, position)
        offsets.append((start, start + len(piece)))
        position = start + len(piece)
    return offsets or [(0, 0)]


class _Painter:
    """Draws the application state onto a curses screen."""

    def __init__(self, screen: curses.window) -> None:
        self.screen = screen
        self.styles = {"": 0, "bold": curses.A_BOLD, "dim": curses.A_DIM, "green": 0}
        self.yellow = 0
        self.cyan = 0
        if curses.has_colors():
            curses.start_color()
            background = curses.COLOR_BLACK
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                pass
            curses.init_pair(1, curses.COLOR_YELLOW, background)
            curses.init_pair(2, curses.COLOR_GREEN, background)
            curses.init_pair(3, curses.COLOR_CYAN, background)
            self.yellow = curses.color_pair(1)
            self.styles["green"] = curses.color_pair(2)
            self.cyan = curses.color_pair(3)

    def _put(self, y: int, x: int, text: str, attr: int, width: int) -> None:
        if width <= 0 or not text:
            return
        try:
            self.screen.addnstr(y, x, text, width, attr)
        except curses.error:
            pass

    def _runs(self, y: int, x: int, chars: Sequence[tuple[str, int]], width: int) -> None:
        column = 0
        for char, attr in chars[:width]:
            self._put(y, x + column, char, attr, 1)
            column += 1

    def _box(self, rect: Rect, title: str, attr: int = 0) -> None:
        if rect.width < 2 or rect.height < 2:
            return
        right = rect.x + rect.width - 1
        bottom = rect.y + rect.height - 1
        calls = [
            lambda: self.screen.hline(rect.y, rect.x + 1, curses.ACS_HLINE | attr, rect.width - 2),
            lambda: self.screen.hline(bottom, rect.x + 1, curses.ACS_HLINE | attr, rect.width - 2),
            lambda: self.screen.vline(rect.y + 1, rect.x, curses.ACS_VLINE | attr, rect.height - 2),
            lambda: self.screen.vline(rect.y + 1, right, curses.ACS_VLINE | attr, rect.height - 2),
            lambda: self.screen.addch(rect.y, rect.x, curses.ACS_ULCORNER, attr),
            lambda: self.screen.addch(rect.y, right, curses.ACS_URCORNER, attr),
            lambda: self.screen.addch(bottom, rect.x, curses.ACS_LLCORNER, attr),
            lambda: self.screen.addch(bottom, right, curses.ACS_LRCORNER, attr),
        ]
        for call in calls:
            try:
                call()
            except curses.error:
                pass
        self._put(rect.y, rect.x + 1, title, attr, rect.width - 2)

    def _clear(self, rect: Rect) -> None:
        for row in range(rect.height):
            self._put(rect.y + row, rect.x, " " * rect.width, 0, rect.width)

    def _chars(self, line: Iterable[Segment], base: int) -> list[tuple[str, int]]:
        return [
            (char, self.styles[style] | base)
            for text, style in line
            for char in text.translate(_WHITESPACE)
        ]

    def _paragraph(self, rect: Rect, lines: Iterable[Line], base: int, wrap: bool) -> None:
        row = 0
        for line in lines:
            chars = self._chars(line, base)
            text = "".join(char for char, _ in chars)
            spans = _wrap_offsets(text, rect.width) if wrap and rect.width > 0 else [(0, len(text))]
            for start, end in spans:
                if row >= rect.height:
                    return
                self._runs(rect.y + row, rect.x, chars[start:end], rect.width)
                row += 1

    def _list(self, rect: Rect, app: App) -> None:
        self._box(rect, " Libraries ")
        inner = _inner(rect)
        if inner.height <= 0:
            return
        selected = app.selected
        offset = 0
        if selected is not None and selected >= inner.height:
            offset = selected - inner.height + 1
        rows = library_rows(app)[offset : offset + inner.height]
        highlight = curses.A_REVERSE | curses.A_BOLD
        for row, line in enumerate(rows):
            index = offset + row
            is_selected = index == selected
            if is_selected:
                prefix = _HIGHLIGHT_SYMBOL
            elif selected is not None:
                prefix = " " * len(_HIGHLIGHT_SYMBOL)
            else:
                prefix = ""
            base = highlight if is_selected else 0
            chars = self._chars(((prefix, ""), *line), base)
            if is_selected:
                chars += [(" ", highlight)] * (inner.width - len(chars))
            self._runs(inner.y + row, inner.x, chars, inner.width)

    def draw(self, app: App) -> None:
        self.screen.erase()
        rows, columns = self.screen.getmaxyx()
        area = Rect(0, 0, columns, rows)
        search, libraries, details, status = split_screen(area)

        search_attr = self.yellow if app.mode is AppMode.SEARCH else 0
        self._box(search, search_title(app.mode), search_attr)
        self._paragraph(_inner(search), [((app.search_input, ""),)], search_attr, wrap=False)

        self._list(libraries, app)

        self._box(details, " Details ")
        self._paragraph(_inner(details), details_lines(app), 0, wrap=True)

        status_attr = (self.cyan | curses.A_BLINK) if app.is_loading else 0
        self._box(status, " Status ", status_attr)
        self._paragraph(
            _inner(status), [((app.status_message, ""),)], status_attr, wrap=False
        )

        if app.mode is AppMode.HELP:
            popup = centered_rect(60, 60, area)
            self._clear(popup)
            self._box(popup, " Help (Press Esc to close) ")
            self._paragraph(_inner(popup), help_lines(), 0, wrap=True)

        self.screen.refresh()


def _read_key(screen: curses.window) -> str | None:
    try:
        code = screen.get_wch()
    except curses.error:
        return None
    return translate_key(code)


async def _event_loop(screen: curses.window) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    try:
        curses.set_escdelay(25)
    except (AttributeError, curses.error):
        pass
    screen.nodelay(True)
    screen.keypad(True)

    painter = _Painter(screen)
    app = App()
    results: asyncio.Queue[Callable[[App], None]] = asyncio.Queue()
    tasks: set[asyncio.Task] = set()

    def spawn(command: Command) -> None:
        async def deliver() -> None:
            await results.put(await run_command(command))

        task = asyncio.create_task(deliver())
        tasks.add(task)
        task.add_done_callback(tasks.discard)

    try:
        spawn(Command(CommandKind.LIST_INSTALLED))
        while True:
            painter.draw(app)
            key = _read_key(screen)
            if key is not None:
                command = app.handle_key(key)
                if command is not None:
                    if command.kind is CommandKind.QUIT:
                        break
                    spawn(command)
            while not results.empty():
                results.get_nowait()(app)
            await asyncio.sleep(0 if key is not None else _POLL_INTERVAL)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


def _curses_main(screen: curses.window) -> None:
    asyncio.run(_event_loop(screen))


def main(argv: Sequence[str] | None = None) -> int:
    """Start the library browser."""
    parser = argparse.ArgumentParser(
        prog="arduino-tui",
        description=(
            "A terminal user interface for browsing, downloading, and updating "
            "Arduino libraries using arduino-cli."
        ),
    )
    parser.parse_args(argv)
    curses.wrapper(_curses_main)
    return 0