"""Tests for the command line surface."""

from typer.testing import CliRunner

from oneshot_agent.cli.app import app

runner = CliRunner()


def _write_config(tmp_path):
    path = tmp_path / "oneshot-agent.yaml"
    path.write_text(
        "oneshot:\n"
        "  api_key: key\n"
        "  api_secret: secret\n"
        "  business_id: biz\n",
        encoding="utf-8",
    )
    return path


def test_invoke_rejects_malformed_json(tmp_path):
    result = runner.invoke(app, ["--config", str(_write_config(tmp_path)), "invoke", "list-chains", "--args", "{oops"])

    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_invoke_unknown_action(tmp_path):
    result = runner.invoke(app, ["--config", str(_write_config(tmp_path)), "invoke", "nope"])

    assert result.exit_code == 1
    assert "Unknown action" in result.output


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml"), "invoke", "list-chains"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
