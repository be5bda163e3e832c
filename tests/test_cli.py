"""Tests for the CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from automerge.cli import app

runner = CliRunner()


def _json(output: str) -> dict:
    return json.loads(output[output.index("{"):])


@pytest.fixture
def use_platform(monkeypatch):
    """Route the CLI to a fake platform instead of GitHub."""
    def install(platform):
        monkeypatch.setattr("automerge.cli._build_platform", lambda repo: platform)
        return platform
    return install


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "automerge" in result.output


class TestInit:
    def test_creates_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert "version: \"1\"" in (tmp_path / ".automerge.yml").read_text()

    def test_refuses_overwrite(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".automerge.yml").write_text("existing")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert (tmp_path / ".automerge.yml").read_text() == "existing"

    def test_force_overwrites(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".automerge.yml").write_text("existing")
        result = runner.invoke(app, ["init", "--force"])
        assert result.exit_code == 0
        assert (tmp_path / ".automerge.yml").read_text() != "existing"


class TestValidate:
    def test_valid_document(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_invalid_document(self, tmp_path: Path):
        bad = tmp_path / "bad.yml"
        bad.write_text("rules:\n  - name: x\n    conditions: {}\n    actions: {mergeMethod: octopus}\n")
        result = runner.invoke(app, ["validate", str(bad)])
        assert result.exit_code == 1
        assert "Invalid merge method" in result.output

    def test_no_document_shows_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert "built-in defaults" in result.output


class TestEvaluate:
    def test_docs_pr_merged(self, use_platform, fake_platform, make_change_set):
        platform = use_platform(fake_platform(make_change_set(["README.md"])))
        result = runner.invoke(app, ["evaluate", "--repo", "acme/widgets", "--pr", "42"])
        assert result.exit_code == 0
        assert "merge" in platform.call_names
        assert "MERGED" in result.output

    def test_source_pr_not_merged(self, use_platform, fake_platform, make_change_set):
        platform = use_platform(fake_platform(make_change_set(["src/auth.ts"])))
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "42"])
        assert result.exit_code == 1
        assert "no-matching-rules" in result.output
        assert "merge" not in platform.call_names

    def test_dry_run(self, use_platform, fake_platform, make_change_set):
        platform = use_platform(fake_platform(make_change_set(["README.md"])))
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "42", "--dry-run"])
        assert result.exit_code == 0
        assert "would be merged" in result.output
        assert "approve" not in platform.call_names

    def test_json_format(self, use_platform, fake_platform, make_change_set):
        use_platform(fake_platform(make_change_set(["README.md"])))
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "42", "-f", "json"])
        assert result.exit_code == 0
        data = _json(result.output)
        assert data["verdict"] == "merged"
        assert data["evaluation"]["reason"] == "documentation-only"
        assert data["outcome"]["mergeSha"] == "merge999"

    def test_local_config(self, tmp_path: Path, use_platform, fake_platform, make_change_set):
        cfg = tmp_path / "rules.yml"
        cfg.write_text(
            "rules:\n"
            "  - name: anything\n"
            "    enabled: true\n"
            "    conditions: {}\n"
            "    actions: {autoMerge: true, mergeMethod: merge}\n"
        )
        platform = use_platform(fake_platform(make_change_set(["src/auth.ts"])))
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "42", "-c", str(cfg)])
        assert result.exit_code == 0
        assert "fetch_file" not in platform.call_names
        assert "merge(merge)" in result.output

    def test_risk_file_veto(self, tmp_path: Path, use_platform, fake_platform, make_change_set):
        cfg = tmp_path / "rules.yml"
        cfg.write_text("rules: []\nsettings: {aiAnalysis: true}\n")
        risk = tmp_path / "risk.json"
        risk.write_text(json.dumps({"riskScore": 0.9, "summary": "auth rewrite"}))
        use_platform(fake_platform(make_change_set(["README.md"])))
        result = runner.invoke(
            app,
            ["evaluate", "-r", "acme/widgets", "-p", "42", "-c", str(cfg), "--risk-file", str(risk)],
        )
        assert result.exit_code == 1
        assert "AI analysis: auth rewrite" in result.output

    def test_invalid_format(self):
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "1", "-f", "sarif"])
        assert result.exit_code == 2

    def test_invalid_repo(self):
        result = runner.invoke(app, ["evaluate", "-r", "widgets", "-p", "1"])
        assert result.exit_code == 2

    def test_missing_config_file(self, tmp_path: Path):
        result = runner.invoke(
            app, ["evaluate", "-r", "acme/widgets", "-p", "1", "-c", str(tmp_path / "nope.yml")]
        )
        assert result.exit_code == 2

    def test_bad_risk_file(self, tmp_path: Path):
        risk = tmp_path / "risk.json"
        risk.write_text("not json")
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "1", "--risk-file", str(risk)])
        assert result.exit_code == 2

    def test_missing_token(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "1"])
        assert result.exit_code == 2
        assert "GITHUB_TOKEN" in result.output

    def test_platform_error(self, use_platform, fake_platform):
        use_platform(fake_platform(fail=["get_change_set"]))
        result = runner.invoke(app, ["evaluate", "-r", "acme/widgets", "-p", "42"])
        assert result.exit_code == 2
        assert "Platform error" in result.output
