"""Tests for pulsetrack.cli -- click commands over a JSONL export."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest
from click.testing import CliRunner

from pulsetrack.cli import main

from tests.conftest import T0, make_block, sample_to_entry, write_jsonl


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def export(tmp_path, scenario_a):
    samples = list(scenario_a)
    samples += make_block(T0 + timedelta(days=1), minutes=15, heart_rate=140, sport="Running")
    samples += make_block(T0 + timedelta(days=2), minutes=6, heart_rate=140, sport="Running")
    # out-of-band readings are dropped before detection
    entries = [sample_to_entry(s) for s in samples]
    entries.append({"timestamp": "2024-03-04T12:00:00Z", "heart_rate": 30, "sport": "Running"})
    return write_jsonl(tmp_path / "export.jsonl", entries)


class TestSessionsCommand:
    def test_lists_sessions(self, runner, export):
        result = runner.invoke(main, ["sessions", str(export)])
        assert result.exit_code == 0, result.output
        assert "3 session(s)" in result.output
        assert "1 short candidate(s) discarded" in result.output
        assert "Cycling" in result.output

    def test_json_output(self, runner, export, tmp_path):
        out = tmp_path / "sessions.json"
        result = runner.invoke(main, ["sessions", str(export), "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert [d["sport"] for d in data] == ["Running", "Cycling", "Running"]
        assert data[2]["trimp_score"] == 1105

    def test_sport_filter(self, runner, export):
        result = runner.invoke(main, ["sessions", str(export), "--sport", "Cycling"])
        assert "1 session(s)" in result.output

    def test_date_filter(self, runner, export):
        result = runner.invoke(main, ["sessions", str(export), "--start", "2024-03-05"])
        assert "1 session(s)" in result.output

    def test_min_duration_override(self, runner, export):
        result = runner.invoke(main, ["sessions", str(export), "--min-duration", "5"])
        assert "4 session(s)" in result.output

    def test_max_hr_from_env(self, runner, export, tmp_path):
        out = tmp_path / "s.json"
        result = runner.invoke(
            main, ["sessions", str(export), "-o", str(out)], env={"PULSETRACK_MAX_HR": "200"},
        )
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())[2]["intensity_score"] == 70

    def test_invalid_max_hr(self, runner, export):
        result = runner.invoke(main, ["sessions", str(export), "--max-hr", "0"])
        assert result.exit_code != 0
        assert "max_heart_rate" in result.output

    def test_bad_file(self, runner, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text("oops\n")
        result = runner.invoke(main, ["sessions", str(path)])
        assert result.exit_code == 1
        assert "line 1" in result.output

    def test_non_utf8_file(self, runner, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_bytes(b"\xff\xfe\n")
        result = runner.invoke(main, ["sessions", str(path)])
        assert result.exit_code == 1
        assert "line 1" in result.output


class TestZonesCommand:
    def test_week(self, runner, export):
        result = runner.invoke(main, ["zones", str(export), "--week-start", "2024-03-04"])
        assert result.exit_code == 0, result.output
        assert "Week 2024-03-04 → 2024-03-10" in result.output
        assert "Sessions:  3" in result.output

    def test_requires_week_start(self, runner, export):
        result = runner.invoke(main, ["zones", str(export)])
        assert result.exit_code != 0


class TestLoadCommand:
    def test_trend(self, runner, export):
        result = runner.invoke(main, ["load", str(export)])
        assert result.exit_code == 0, result.output
        assert "2024-03-04" in result.output
        assert "2024-03-05" in result.output
        assert "1105" in result.output

    def test_empty_range(self, runner, export):
        result = runner.invoke(main, ["load", str(export), "--start", "2025-01-01"])
        assert "No sessions in range." in result.output


class TestSportsCommand:
    def test_breakdown(self, runner, export):
        result = runner.invoke(main, ["sports", str(export)])
        assert result.exit_code == 0, result.output
        lines = [l for l in result.output.splitlines() if l.strip()]
        assert lines[0].split()[0] == "Running"
        assert "Cycling" in result.output
