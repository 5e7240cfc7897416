import asyncio
import json

import pytest

from arduino_tui.cli import (
    CliError,
    LibraryInfo,
    install_library,
    list_installed_libraries,
    parse_list_output,
    parse_search_output,
    search_libraries,
    uninstall_library,
)

SEARCH_JSON = json.dumps(
    {
        "libraries": [
            {
                "name": "Servo",
                "latest": {
                    "author": "Michael Margolis",
                    "version": "1.2.1",
                    "sentence": "Allows Arduino boards to control servo motors.",
                    "category": "Device Control",
                },
            },
            {"name": "Bare", "latest": {"version": "0.1.0"}},
        ]
    }
)

LIST_JSON = json.dumps(
    {
        "installed_libraries": [
            {
                "library": {
                    "name": "Servo",
                    "version": "1.2.1",
                    "author": "Michael Margolis",
                    "category": "Device Control",
                }
            }
        ]
    }
)


class FakeProcess:
    def __init__(self, stdout=b"", stderr=b"", returncode=0):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode

    async def communicate(self):
        return self._stdout, self._stderr

    def kill(self):
        self.returncode = -9


@pytest.fixture
def fake_exec(monkeypatch):
    calls = []
    state = {"process": FakeProcess()}

    async def _exec(*args, **kwargs):
        calls.append(args)
        return state["process"]

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _exec)

    def use(process):
        state["process"] = process
        return calls

    return use


def test_parse_search_output_maps_latest_release():
    libs = parse_search_output(SEARCH_JSON)
    assert libs[0] == LibraryInfo(
        name="Servo",
        version="1.2.1",
        author="Michael Margolis",
        sentence="Allows Arduino boards to control servo motors.",
        category="Device Control",
        is_installed=False,
    )
    assert libs[1].author is None
    assert libs[1].sentence is None
    assert [lib.is_installed for lib in libs] == [False, False]


def test_parse_search_output_accepts_bytes():
    assert parse_search_output(SEARCH_JSON.encode()) == parse_search_output(SEARCH_JSON)


def test_parse_search_output_requires_libraries_field():
    with pytest.raises(CliError):
        parse_search_output("{}")


def test_parse_search_output_requires_version():
    with pytest.raises(CliError):
        parse_search_output(json.dumps({"libraries": [{"name": "X", "latest": {}}]}))


def test_parse_search_output_rejects_invalid_json():
    with pytest.raises(CliError):
        parse_search_output("not json")


def test_parse_list_output_marks_installed():
    libs = parse_list_output(LIST_JSON)
    assert len(libs) == 1
    assert libs[0].name == "Servo"
    assert libs[0].version == "1.2.1"
    assert libs[0].sentence is None
    assert libs[0].is_installed is True


@pytest.mark.parametrize("payload", ["{}", '{"installed_libraries": null}'])
def test_parse_list_output_without_libraries_is_empty(payload):
    assert parse_list_output(payload) == []


def test_parse_list_output_requires_library_field():
    with pytest.raises(CliError):
        parse_list_output(json.dumps({"installed_libraries": [{}]}))


@pytest.mark.asyncio
async def test_search_libraries_passes_query(fake_exec):
    calls = fake_exec(FakeProcess(stdout=SEARCH_JSON.encode()))
    libs = await search_libraries("servo")
    assert calls == [("arduino-cli", "lib", "search", "servo", "--format", "json")]
    assert [lib.name for lib in libs] == ["Servo", "Bare"]


@pytest.mark.asyncio
async def test_search_libraries_empty_query_omits_argument(fake_exec):
    calls = fake_exec(FakeProcess(stdout=b'{"libraries": []}'))
    assert await search_libraries("") == []
    assert calls == [("arduino-cli", "lib", "search", "--format", "json")]


@pytest.mark.asyncio
async def test_list_installed_libraries(fake_exec):
    calls = fake_exec(FakeProcess(stdout=LIST_JSON.encode()))
    libs = await list_installed_libraries()
    assert calls == [("arduino-cli", "lib", "list", "--format", "json")]
    assert libs == parse_list_output(LIST_JSON)


@pytest.mark.asyncio
async def test_install_and_uninstall_arguments(fake_exec):
    calls = fake_exec(FakeProcess())
    installed = await install_library("Servo")
    uninstalled = await uninstall_library("Servo")
    assert installed is None
    assert uninstalled is None
    assert calls == [
        ("arduino-cli", "lib", "install", "Servo"),
        ("arduino-cli", "lib", "uninstall", "Servo"),
    ]


@pytest.mark.asyncio
async def test_failure_raises_with_stderr(fake_exec):
    fake_exec(FakeProcess(stderr=b"library not found", returncode=1))
    with pytest.raises(CliError) as info:
        await install_library("Nope")
    assert str(info.value) == "library not found"


@pytest.mark.asyncio
async def test_uninstall_failure_raises_with_stderr(fake_exec):
    fake_exec(FakeProcess(stderr=b"not installed", returncode=2))
    with pytest.raises(CliError) as info:
        await uninstall_library("Nope")
    assert str(info.value) == "not installed"


@pytest.mark.asyncio
async def test_missing_program_raises(monkeypatch):
    async def _exec(*args, **kwargs):
        raise FileNotFoundError("no such file")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _exec)
    with pytest.raises(CliError):
        await list_installed_libraries()