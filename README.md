# arduino-tui

A terminal user interface for browsing, installing and removing Arduino
libraries. It runs `arduino-cli` in the background, so `arduino-cli` must be
installed and on your `PATH`. The screen is drawn with the standard `curses`
module, so it needs a terminal that `curses` supports (POSIX systems).

## Installation

```
pip install .
```

## Usage

Start the interface:

```
arduino-tui
```

It takes no options besides `--help`.

When it starts, it loads the libraries that are already installed. The screen
has a search box at the top, the library list on the left (40% of the width),
a details pane on the right and a status line at the bottom. The details pane
shows the name, version, author, category, description and install status of
the selected library.

### Keys

Navigation

- `j` / Down: move down (wraps around to the top after the last library)
- `k` / Up: move up (wraps around to the bottom from the first library)

Actions

- `/`: enter search mode. Type a query (Backspace deletes) and press Enter to
  search the library index. Enter on an empty query lists the installed
  libraries again. Esc leaves search mode and, if a query was typed, clears it
  and reloads the installed libraries.
- `i`: install the selected library
- `u`: uninstall the selected library
- Esc (outside search mode): if a query is set, clear it and reload the
  installed libraries

General

- `?` / `h`: show the help popup; `?`, `h`, `q` or Esc close it
- `q`: quit (when the help popup is open, it only closes the popup)

Libraries marked `[I]` are installed; `[ ]` are not. After an install or
uninstall succeeds, the marker of that library in the current list is updated.
Errors reported by `arduino-cli` are shown in the status line.

## Using it as a library

`arduino_tui.cli` wraps the `arduino-cli` library commands as async functions:

- `search_libraries(query)`: runs `arduino-cli lib search [query] --format json`
  and returns the latest release of each match (an empty query lists every
  library in the index)
- `list_installed_libraries()`: runs `arduino-cli lib list --format json`
- `install_library(name)` and `uninstall_library(name)`

They return `LibraryInfo` records (`name`, `version`, `author`, `sentence`,
`category`, `is_installed`) and raise `CliError` when `arduino-cli` cannot be
started, exits with an error (the message is its standard error), or prints
JSON of the wrong shape. `parse_search_output` and `parse_list_output` turn
that JSON into `LibraryInfo` lists without starting any process.

`arduino_tui.app` holds the interface state in the `App` class. `App.handle_key`
takes a key (a one-character string, or one of `up`, `down`, `enter`, `esc`,
`backspace`) and returns the `Command` to run, if any; a `Command` has a
`CommandKind` (`LIST_INSTALLED`, `SEARCH`, `INSTALL`, `UNINSTALL`, `QUIT`) and
an argument. Results go back in through `App.libraries_loaded`,
`App.library_installed`, `App.library_uninstalled` and `App.command_error`.

`arduino_tui.ui` holds the layout helpers (`Rect`, `split_screen`,
`centered_rect`), the text of each pane (`search_title`, `library_rows`,
`details_lines`, `help_lines`), `translate_key` for curses key codes,
`run_command`, which carries out a `Command` and returns a function that
applies its outcome to an `App`, and `main`, the entry point of the
`arduino-tui` command.

## What it does not do

There is no way to upgrade installed libraries or to pick a library version:
`i` installs whatever `arduino-cli lib install <name>` chooses. Boards, cores
and sketches are not handled.

## Running the tests

```
pip install ".[test]"
pytest
```