"""Tests for the management CLI argument handling."""

from unittest.mock import patch

import pytest

import cli

pytestmark = pytest.mark.unit


class TestCliDispatch:
    def test_migrate_defaults_to_head(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["cli", "migrate"])

        with patch("cli.cmd_migrate", return_value=0) as mock_migrate:
            assert cli.main() == 0

        mock_migrate.assert_called_once_with("head")

    def test_migrate_to_revision(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["cli", "migrate", "0001"])

        with patch("cli.cmd_migrate", return_value=0) as mock_migrate:
            cli.main()

        mock_migrate.assert_called_once_with("0001")

    def test_serve_options(self, monkeypatch):
        monkeypatch.setattr(
            "sys.argv", ["cli", "serve", "--host", "0.0.0.0", "--port", "9000"]
        )

        with patch("cli.cmd_serve", return_value=0) as mock_serve:
            cli.main()

        mock_serve.assert_called_once_with("0.0.0.0", 9000, False)

    def test_no_command_prints_help(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["cli"])

        assert cli.main() == 1
        assert "migrate" in capsys.readouterr().out


class TestAlembicConfig:
    def test_script_location_is_absolute(self):
        cfg = cli._get_alembic_config()

        location = cfg.get_main_option("script_location")
        assert location == str(cli.API_DIR / "alembic")
