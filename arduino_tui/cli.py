"""Thin asynchronous wrapper around the ``arduino-cli`` library commands."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any

ARDUINO_CLI = "arduino-cli"


class CliError(Exception):
    """Raised when ``arduino-cli`` cannot be run, fails, or prints unusable output."""


@dataclass
class LibraryInfo:
    """One Arduino library as shown in the interface."""

    name: str
    version: str
    author: str | None = None
    sentence: str | None = None
    category: str | None = None
    is_installed: bool = False


def _load(data: bytes | str) -> Any:
    try:
        return json.loads(data)
    except (ValueError, TypeError) as exc:
        raise CliError(str(exc)) from exc


def _object(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise CliError(f"invalid type: expected {what} to be an object")
    return value


def _required_str(mapping: dict, key: str) -> str:
    if key not in mapping:
        raise CliError(f"missing field `{key}`")
    value = mapping[key]
    if not isinstance(value, str):
        raise CliError(f"invalid type: expected `{key}` to be a string")
    return value


def _optional_str(mapping: dict, key: str) -> str | None:
    value = mapping.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise CliError(f"invalid type: expected `{key}` to be a string")
    return value


def _list(value: Any, key: str) -> list:
    if not isinstance(value, list):
        raise CliError(f"invalid type: expected `{key}` to be a list")
    return value


def _library_from(mapping: dict, name: str, installed: bool) -> LibraryInfo:
    return LibraryInfo(
        name=name,
        version=_required_str(mapping, "version"),
        author=_optional_str(mapping, "author"),
        sentence=_optional_str(mapping, "sentence"),
        category=_optional_str(mapping, "category"),
        is_installed=installed,
    )


def parse_search_output(data: bytes | str) -> list[LibraryInfo]:
    """Turn the JSON printed by ``lib search`` into libraries (latest releases)."""
    result = _object(_load(data), "search result")
    if "libraries" not in result:
        raise CliError("missing field `libraries`")
    libraries = []
    for entry in _list(result["libraries"], "libraries"):
        entry = _object(entry, "library")
        name = _required_str(entry, "name")
        if "latest" not in entry:
            raise CliError("missing field `latest`")
        latest = _object(entry["latest"], "latest")
        libraries.append(_library_from(latest, name, installed=False))
    return libraries


def parse_list_output(data: bytes | str) -> list[LibraryInfo]:
    """Turn the JSON printed by ``lib list`` into installed libraries."""
    result = _object(_load(data), "list result")
    installed = result.get("installed_libraries")
    if installed is None:
        return []
    libraries = []
    for entry in _list(installed, "installed_libraries"):
        entry = _object(entry, "installed library")
        if "library" not in entry:
            raise CliError("missing field `library`")
        library = _object(entry["library"], "library")
        libraries.append(
            _library_from(library, _required_str(library, "name"), installed=True)
        )
    return libraries


async def _run(*args: str) -> bytes:
    """Run ``arduino-cli`` with *args* and return its standard output."""
    try:
        process = await asyncio.create_subprocess_exec(
            ARDUINO_CLI,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise CliError(str(exc)) from exc
    try:
        stdout, stderr = await process.communicate()
    except BaseException:
        if process.returncode is None:
            process.kill()
        raise
    if process.returncode != 0:
        raise CliError(stderr.decode("utf-8", errors="replace"))
    return stdout


async def search_libraries(query: str) -> list[LibraryInfo]:
    """Search the library index; an empty query lists every library."""
    args = ["lib", "search"]
    if query:
        args.append(query)
    args += ["--format", "json"]
    return parse_search_output(await _run(*args))


async def list_installed_libraries() -> list[LibraryInfo]:
    """List the libraries that are installed."""
    return parse_list_output(await _run("lib", "list", "--format", "json"))


async def install_library(name: str) -> None:
    """Install the library called *name*."""
    await _run("lib", "install", name)


async def uninstall_library(name: str) -> None:
    """Uninstall the library called *name*."""
    await _run("lib", "uninstall", name)