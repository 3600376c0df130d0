"""Tests for the click command-line interface."""

from click.testing import CliRunner

from commerce.infrastructure.cli.main import cli

GOOD_ENV = {
    "MONGO_URI": "mongodb://localhost:27017",
    "MONGO_DB_NAME": "commerce",
    "JWT_SECRET": "x" * 32,
    "HOST": "localhost",
    "PORT": "4000",
}


class TestCheckConfig:

    def test_valid_configuration(self):
        result = CliRunner().invoke(cli, ["check-config"], env=GOOD_ENV)
        assert result.exit_code == 0
        assert "Server:      localhost:4000" in result.output
        assert "Configuration OK" in result.output

    def test_invalid_configuration_exits_1(self, monkeypatch):
        for name in GOOD_ENV:
            monkeypatch.delenv(name, raising=False)
        result = CliRunner().invoke(cli, ["check-config"], env={"JWT_SECRET": "short"})
        assert result.exit_code == 1
        assert "MONGO_URI is required" in result.output


class TestServe:

    def test_unknown_service_rejected(self):
        result = CliRunner().invoke(cli, ["serve", "inventory"])
        assert result.exit_code == 2
