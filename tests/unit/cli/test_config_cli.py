"""Tests for config CLI commands."""

import json

from typer.testing import CliRunner

from promrw.cli.config import REDACTED, _settings_to_dict
from promrw.cli.main import app
from promrw.config import Settings

runner = CliRunner()


class TestConfigShow:
    """Tests for promrw config show."""

    def test_show_table(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0, result.output
        assert "Remote Write Settings" in result.output
        assert "Logging Settings" in result.output

    def test_show_yaml_section(self):
        result = runner.invoke(app, ["config", "show", "--format", "yaml", "-s", "logging"])

        assert result.exit_code == 0, result.output
        assert "level" in result.output
        assert "remote_write" not in result.output

    def test_unknown_section(self):
        result = runner.invoke(app, ["config", "show", "--section", "storage"])

        assert result.exit_code == 1
        assert "Unknown section" in result.output

    def test_invalid_format(self):
        result = runner.invoke(app, ["config", "show", "--format", "xml"])

        assert result.exit_code == 1


def test_headers_are_redacted():
    settings = Settings(
        remote_write_url="http://prometheus.test/api/v1/write",
        remote_write_headers={"Authorization": "Bearer secret-token"},
    )

    config_dict = _settings_to_dict(settings)

    assert config_dict["remote_write"]["headers"] == {"Authorization": REDACTED}
    assert "secret-token" not in json.dumps(config_dict)
