from click.testing import CliRunner
from scimpatch.cli.main import cli


def test_parse_filtered_path():
    result = CliRunner().invoke(cli, ["parse", "add", 'emails[type eq "work"].value', "a@b.com"])
    assert result.exit_code == 0
    assert "emails" in result.output
    assert "type eq" in result.output
    assert "'emails', 0, 'value'" in result.output


def test_parse_unresolved_path():
    result = CliRunner().invoke(cli, ["parse", "replace", "nickName", "Babs"])
    assert result.exit_code == 0
    assert "not found" in result.output


def test_parse_rejects_bad_op():
    result = CliRunner().invoke(cli, ["parse", "move", "displayName", "Babs"])
    assert result.exit_code != 0


def test_parse_filter_key_is_not_mutable():
    result = CliRunner().invoke(cli, ["parse", "replace", "emails.type", "home"])
    assert result.exit_code == 0
    assert "not found" in result.output
