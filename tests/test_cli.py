"""Tests for the typespecific CLI.

These tests verify:
- resolve reports attempts and exit codes
- JSON output
- config show and config init
"""

import json

import pytest
from click.testing import CliRunner

from typespecific.cli.main import cli


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    for name in (
        "TYPESPECIFIC_SCOPE",
        "TYPESPECIFIC_POSTFIX",
        "TYPESPECIFIC_HANDLER_NAMESPACE",
        "TYPESPECIFIC_SUBJECT_FALLBACK",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "typespecific.config.DEFAULT_CONFIG_PATH", tmp_path / "default" / "config.json"
    )


def run(*args):
    return CliRunner().invoke(cli, list(args))


class TestResolve:
    """Test resolve command."""

    def test_resolve_found(self):
        result = run(
            "resolve",
            "sample_handlers.subjects:Circle",
            "--postfix",
            "Renderer",
            "--namespace",
            "sample_handlers.renderers",
        )

        assert result.exit_code == 0
        assert "Found" in result.output
        assert "CircleRenderer" in result.output

    def test_resolve_json(self):
        result = run(
            "resolve",
            "sample_handlers.subjects.Hexagon",
            "-p",
            "Renderer",
            "-n",
            "sample_handlers.renderers",
            "--json",
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["found"] is True
        assert data["subject"] == "sample_handlers.subjects.Hexagon"
        assert data["handler"] == "sample_handlers.subjects.HexagonRenderer"
        assert data["source"] == "subject_namespace"
        assert [a["outcome"] for a in data["attempts"]] == [
            "construction_failure",
            "resolved",
        ]
        assert "broken" in data["attempts"][0]["error"]

    def test_resolve_not_found(self):
        result = run("resolve", "sample_handlers.subjects:Polygon", "-p", "Renderer")

        assert result.exit_code == 1
        assert "No handler found" in result.output

    def test_resolve_not_found_json(self):
        result = run(
            "resolve", "sample_handlers.subjects:Polygon", "-p", "Renderer", "--json"
        )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["found"] is False
        assert data["handler"] is None
        assert len(data["attempts"]) == 2

    def test_resolve_without_postfix(self):
        result = run("resolve", "sample_handlers.subjects:Circle")

        assert result.exit_code == 1
        assert "No strategies to try" in result.output

    def test_resolve_no_subject_fallback(self):
        result = run(
            "resolve",
            "sample_handlers.subjects:Circle",
            "-p",
            "Renderer",
            "--no-subject-fallback",
            "--json",
        )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert [a["strategy"] for a in data["attempts"]] == ["handler_namespace"]

    def test_resolve_unknown_subject(self):
        result = run("resolve", "sample_handlers.subjects:Dodecahedron", "-p", "Renderer")

        assert result.exit_code == 1
        assert "Cannot load subject type" in result.output

    def test_resolve_uses_config_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps(
                {"postfix": "Renderer", "handler_namespace": "sample_handlers.renderers"}
            )
        )

        result = run(
            "-c", str(config_path), "resolve", "sample_handlers.subjects:Square", "--json"
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["handler"] == "sample_handlers.renderers.SquareRenderer"
        assert data["source"] == "handler_namespace"

    def test_resolve_env_postfix(self, monkeypatch):
        monkeypatch.setenv("TYPESPECIFIC_POSTFIX", "Renderer")

        result = run("resolve", "sample_handlers.subjects:Circle", "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["found"] is True


class TestConfigCommands:
    """Test config show and config init."""

    def test_show_defaults_json(self):
        result = run("config", "show", "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "scope": "singleton",
            "postfix": None,
            "handler_namespace": None,
            "fallback_to_subject_namespace": True,
        }

    def test_show_table(self):
        result = run("config", "show")

        assert result.exit_code == 0
        assert "scope" in result.output
        assert "singleton" in result.output

    def test_show_env_override(self, monkeypatch):
        monkeypatch.setenv("TYPESPECIFIC_SCOPE", "prototype")

        result = run("config", "show", "--json")

        assert json.loads(result.stdout)["scope"] == "prototype"

    def test_show_invalid_config(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"scope": "eternal"}))

        result = run("-c", str(config_path), "config", "show")

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_show_invalid_env_flag(self, monkeypatch):
        monkeypatch.setenv("TYPESPECIFIC_SUBJECT_FALLBACK", "maybe")

        result = run("config", "show")

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_init_writes_file(self, tmp_path):
        config_path = tmp_path / "out" / "config.json"

        result = run(
            "-c", str(config_path), "config", "init", "-p", "Renderer", "-s", "prototype"
        )

        assert result.exit_code == 0
        assert json.loads(config_path.read_text()) == {
            "scope": "prototype",
            "postfix": "Renderer",
            "handler_namespace": None,
            "fallback_to_subject_namespace": True,
        }

    def test_init_refuses_overwrite(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{}")

        result = run("-c", str(config_path), "config", "init")

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert config_path.read_text() == "{}"

    def test_init_force(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{}")

        result = run("-c", str(config_path), "config", "init", "-p", "Editor", "--force")

        assert result.exit_code == 0
        assert json.loads(config_path.read_text())["postfix"] == "Editor"
