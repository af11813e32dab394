"""Tests for src/cli.py."""

import argparse
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.variants import EventSource
from src.cli import _parse_target, import_app, main


class TestParseTarget:

    def test_valid(self):
        assert _parse_target("app.functions:Functions.handle") == ("app.functions", "Functions", "handle")

    @pytest.mark.parametrize("value", ["app.functions", "app:Functions", ":Functions.handle", "app:.handle"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_target(value)


class TestImportApp:

    def test_imports_attribute(self):
        from src.main import app
        assert import_app("src.main:app") is app

    def test_missing_attribute(self):
        with pytest.raises(ValueError, match="no attribute"):
            import_app("src.main:nope")

    def test_bad_format(self):
        with pytest.raises(ValueError, match="module:attribute"):
            import_app("src.main")


class TestGenerate:

    def test_writes_to_stdout(self, capsys):
        assert main(["generate", "app.functions:Functions.handle"]) == 0
        out = capsys.readouterr().out
        assert "from app.functions import Functions" in out
        assert "functions_handle = Functions_handle_Generated().handle" in out

    def test_writes_to_file(self, tmp_path, capsys):
        target = tmp_path / "handlers.py"
        main([
            "generate", "app.functions:Functions.handle",
            "--di", "--startup", "app.startup:Startup",
            "-o", str(target),
        ])
        source = target.read_text()
        assert "from app.startup import Startup" in source
        assert "Startup().configure_services(services)" in source
        assert f"Wrote {target}" in capsys.readouterr().out

    def test_bad_target_exits(self, capsys):
        with pytest.raises(SystemExit):
            main(["generate", "not-a-target"])
        assert "module:Class.method" in capsys.readouterr().err


class TestServe:

    def test_starts_server(self, override_settings):
        override_settings(LIFESPAN="off")
        server = MagicMock()
        server.event_source = EventSource.REST_API
        with patch("src.hosting.server.LambdaRuntimeSupportServer.from_settings", return_value=server) as from_settings:
            assert main(["serve", "src.main:app", "--event-source", "rest_api"]) == 0

        from src.main import app
        args, kwargs = from_settings.call_args
        assert args[0] is app
        assert kwargs == {"event_source": "rest_api"}
        server.start.assert_called_once_with()


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "generate" in capsys.readouterr().out
