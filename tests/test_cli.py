from sprinkle.cli import cli
from typer.testing import CliRunner

runner = CliRunner()


def test_render_root():
	result = runner.invoke(cli, ["render", "/"])
	assert result.exit_code == 0
	assert result.stdout.startswith("<!DOCTYPE html>")
	assert "function myHelperFunction()" in result.stdout


def test_render_defaults_to_root():
	result = runner.invoke(cli, ["render"])
	assert result.exit_code == 0
	assert "glowButton" in result.stdout


def test_render_unknown_path():
	result = runner.invoke(cli, ["render", "/missing"])
	assert result.exit_code == 1


def test_run_uses_env(monkeypatch):
	calls = []
	monkeypatch.setenv("SPRINKLE_HOST", "127.0.0.1")
	monkeypatch.setenv("SPRINKLE_PORT", "4321")
	monkeypatch.setattr(
		"sprinkle.app.uvicorn.run", lambda app, **kwargs: calls.append(kwargs)
	)
	result = runner.invoke(cli, ["run"])
	assert result.exit_code == 0
	assert calls == [{"host": "127.0.0.1", "port": 4321}]


def test_run_flags_override_env(monkeypatch):
	calls = []
	monkeypatch.setenv("SPRINKLE_PORT", "4321")
	monkeypatch.setattr(
		"sprinkle.app.uvicorn.run", lambda app, **kwargs: calls.append(kwargs)
	)
	result = runner.invoke(cli, ["run", "--host", "0.0.0.0", "--port", "9000"])
	assert result.exit_code == 0
	assert calls == [{"host": "0.0.0.0", "port": 9000}]


def test_run_explicit_port_zero(monkeypatch):
	calls = []
	monkeypatch.setenv("SPRINKLE_PORT", "4321")
	monkeypatch.setattr(
		"sprinkle.app.uvicorn.run", lambda app, **kwargs: calls.append(kwargs)
	)
	result = runner.invoke(cli, ["run", "--host", "127.0.0.1", "--port", "0"])
	assert result.exit_code == 0
	assert calls == [{"host": "127.0.0.1", "port": 0}]
