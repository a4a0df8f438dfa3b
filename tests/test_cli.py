"""Tests for the command-line interface."""

import json

from typer.testing import CliRunner

from src.main import app

runner = CliRunner()


class TestCli:
    def test_tunings(self):
        result = runner.invoke(app, ["tunings"])
        assert result.exit_code == 0
        assert "Drop D" in result.output

    def test_tab(self, tmp_path, write_midi):
        midi_path = write_midi([(64, 0.0, 0.5)])
        out = tmp_path / "out"
        result = runner.invoke(app, ["tab", str(midi_path), "--output-dir", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads((out / "song_tab.json").read_text(encoding="utf-8"))
        assert len(data[0]["measures"]) == 1

    def test_tab_missing_file(self, tmp_path):
        result = runner.invoke(app, ["tab", str(tmp_path / "missing.mid"), "--output-dir", str(tmp_path)])
        assert result.exit_code == 1

    def test_tab_unknown_tuning(self, tmp_path, write_midi):
        midi_path = write_midi([(64, 0.0, 0.5)])
        result = runner.invoke(app, ["tab", str(midi_path), "-t", "banjo", "-o", str(tmp_path)])
        assert result.exit_code == 1
