import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock
from pathlib import Path

from snapcache.infrastructure.cache.factory import CacheFactory

# Import the app instance from main
from snapcache.main import app


@pytest.fixture
def mock_console_display(mocker) -> MagicMock:
    """Patches ConsoleDisplay in main so commands report through a mock."""
    display = MagicMock()
    mocker.patch("snapcache.main.ConsoleDisplay", return_value=display)
    return display


@pytest.fixture
def real_factory(cache_dir: Path) -> CacheFactory:
    """Factory on the wall clock, matching what the CLI builds."""
    return CacheFactory(cache_dir)


def invoke(runner: CliRunner, cache_dir: Path, *args: str):
    return runner.invoke(app, ["--dir", str(cache_dir), *args])


def test_list_command_flow(runner, cache_dir, real_factory, mock_console_display):
    real_factory.open("alpha").save([1])
    real_factory.open("nested/beta", expiry=3600).save(["b"])

    result = invoke(runner, cache_dir, "list")

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    headers, rows = mock_console_display.display_table.call_args.args
    assert headers == ["Identifier", "Payload bytes", "Expires", "Status"]
    assert [row[0] for row in rows] == ["alpha", "nested/beta"]
    assert all(row[3] == "ok" for row in rows)


def test_show_command_flow(runner, cache_dir, real_factory, mock_console_display):
    real_factory.open("numbers").save([1, 2, 3])

    result = invoke(runner, cache_dir, "show", "numbers")

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    mock_console_display.display_output.assert_called_once_with([1, 2, 3], title="numbers (3 items)")
    mock_console_display.display_error.assert_not_called()


def test_show_with_json_codec(runner, cache_dir, mock_console_display):
    CacheFactory(cache_dir, codec="json").open("doc").save([{"a": 1}])

    result = invoke(runner, cache_dir, "show", "--codec", "json", "doc")

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    mock_console_display.display_output.assert_called_once_with([{"a": 1}], title="doc (1 items)")


def test_show_expired_cache_deletes_file(runner, cache_dir, real_factory, mock_console_display):
    real_factory.open("stale", expiry=-1).save([1])

    result = invoke(runner, cache_dir, "show", "stale")

    assert result.exit_code == 0
    mock_console_display.display_warning.assert_called_once_with("Cache 'stale' has expired and was deleted")
    assert not (cache_dir / "stale").exists()


def test_show_corrupt_cache_fails(runner, cache_dir, real_factory, mock_console_display):
    (cache_dir / "broken").write_bytes(b"\x05\x00\x00\x00nope!")

    result = invoke(runner, cache_dir, "show", "broken")

    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once()


def test_inspect_missing_cache_fails(runner, cache_dir, real_factory, mock_console_display):
    result = invoke(runner, cache_dir, "inspect", "ghost")

    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once()


def test_clear_and_purge_flow(runner, cache_dir, real_factory, mock_console_display):
    real_factory.open("keep").save([1])
    real_factory.open("drop").save([1])
    real_factory.open("stale", expiry=-1).save([1])

    result = invoke(runner, cache_dir, "clear", "drop")
    assert result.exit_code == 0
    mock_console_display.display_info.assert_any_call("Removed cache 'drop'")

    result = invoke(runner, cache_dir, "purge")
    assert result.exit_code == 0
    mock_console_display.display_info.assert_any_call("Removed 1 expired cache(s): stale")
    assert real_factory.identifiers() == ["keep"]


def test_cache_dir_from_environment(runner, cache_dir, real_factory, mock_console_display, monkeypatch):
    real_factory.open("from-env").save([1])
    monkeypatch.setenv("SNAPCACHE_CACHE_DIR", str(cache_dir))

    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    _, rows = mock_console_display.display_table.call_args.args
    assert [row[0] for row in rows] == ["from-env"]


def test_unusable_cache_dir_exits(runner, tmp_path, mock_console_display):
    blocker = tmp_path / "file-not-dir"
    blocker.write_text("x")

    result = runner.invoke(app, ["--dir", str(blocker / "caches"), "list"])

    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once()


def test_real_console_output(runner, cache_dir, real_factory):
    real_factory.open("visible").save(["hello"])

    result = invoke(runner, cache_dir, "show", "visible")

    assert result.exit_code == 0
    assert "hello" in result.stdout
