from typer.testing import CliRunner

from livebox_cli.cli import app


def test_help_shows_available_commands(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "exec" in result.stdout
    assert "nat" in result.stdout
    assert "version" in result.stdout
    assert "--base-url" in result.stdout
    assert "--query" in result.stdout


def test_nat_help_shows_expected_subcommands(runner: CliRunner) -> None:
    result = runner.invoke(app, ["nat", "--help"])

    assert result.exit_code == 0
    for subcommand in ("list", "add", "enable", "disable", "remove", "commit"):
        assert subcommand in result.stdout


def test_nat_add_help_shows_rule_options(runner: CliRunner) -> None:
    result = runner.invoke(app, ["nat", "add", "--help"])

    assert result.exit_code == 0
    for option in ("--id", "--protocol", "--source", "--sport", "--destination", "--dport"):
        assert option in result.stdout


def test_version_does_not_need_credentials(runner: CliRunner) -> None:
    result = runner.invoke(app, ["version"], env={"LIVEBOX_CLI_PASSWORD": ""})

    assert result.exit_code == 0
    assert "livebox-cli" in result.stdout
