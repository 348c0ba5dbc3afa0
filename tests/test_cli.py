from __future__ import annotations

import json

import pytest

from audiodigest import cli


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda _settings, **_kw: None)


def test_config_set_persists_and_show_masks_the_key(tmp_path, capsys) -> None:
    settings_file = tmp_path / "data.json"

    assert cli.main(["--settings", str(settings_file), "config", "set", "aiApiKey", "sk-1234567890"]) == 0
    assert cli.main(["--settings", str(settings_file), "config", "set", "ai_model", "gpt-4o-mini"]) == 0
    capsys.readouterr()

    assert cli.main(["--settings", str(settings_file), "config", "show"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["aiModel"] == "gpt-4o-mini"
    assert shown["aiApiKey"] == "sk-…7890"

    stored = json.loads(settings_file.read_text(encoding="utf-8"))
    assert stored["aiApiKey"] == "sk-1234567890"


def test_config_set_rejects_bad_values(tmp_path, capsys) -> None:
    code = cli.main(["--settings", str(tmp_path / "data.json"), "config", "set", "chunkMaxChars", "abc"])
    assert code == 2
    assert "configuration error" in capsys.readouterr().err


def test_run_reports_the_failing_stage(tmp_path, capsys) -> None:
    code = cli.main(["--settings", str(tmp_path / "data.json"), "run", str(tmp_path / "missing.mp3")])
    assert code == 1
    assert "failed at start [INVALID_MEDIA]" in capsys.readouterr().err


def test_run_prints_summary_path(tmp_path, capsys, fakes) -> None:
    settings_file = tmp_path / "data.json"
    settings_file.write_text(json.dumps({"aiApiKey": "sk-test"}), encoding="utf-8")
    (tmp_path / "talk.mp3").write_bytes(b"mp3")

    code = cli.main(["--settings", str(settings_file), "run", "talk.mp3", "--base-dir", str(tmp_path), "--quiet"])

    assert code == 0
    assert capsys.readouterr().out.strip() == str(tmp_path / "talk-summary.md")
    assert fakes.llm.calls


def test_config_show_reads_comma_separated_env_lists(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("AUDIODIGEST_SUPPORTED_EXTENSIONS", "mp3,wav")

    assert cli.main(["--settings", str(tmp_path / "data.json"), "config", "show"]) == 0
    assert json.loads(capsys.readouterr().out)["supportedExtensions"] == ["mp3", "wav"]
