"""Tests for the eclss-guard command line."""

import pytest

from eclss_guard import cli


@pytest.fixture(autouse=True)
def quiet_env(monkeypatch):
    monkeypatch.delenv("ECLSS_GUARD_CONFIG", raising=False)
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)


class TestOneShotCommands:
    def test_score(self, capsys):
        assert cli.main(["score", "--co2", "500"]) == 0
        out = capsys.readouterr().out
        assert "Anomaly score: 33.3 / 100" in out
        assert "valve_mismatch" in out

    def test_score_rejects_invalid_telemetry(self, capsys):
        assert cli.main(["score", "--humidity", "-5"]) == 2
        assert "Invalid telemetry" in capsys.readouterr().out

    def test_diagnose(self, capsys):
        assert cli.main(["diagnose", "CO2", "--co2", "1600", "--airflow", "0.5"]) == 0
        lines = capsys.readouterr().out.splitlines()
        ranked = [line for line in lines if line.strip().startswith(("1.", "2."))]
        assert "Scrubber Valve Stuck" in ranked[0]
        assert "72.2%" in ranked[0]
        assert "CO2 Sensor Drift" in ranked[1]

    def test_diagnose_rejects_unknown_category(self):
        with pytest.raises(SystemExit):
            cli.main(["diagnose", "RADIATION"])

    def test_faults(self, capsys):
        assert cli.main(["faults"]) == 0
        out = capsys.readouterr().out
        assert "CO2Scrubber" in out
        assert "Potential Hull Breach" in out
        assert "Switch to Backup Water" in out

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestRunCommand:
    def test_run_with_injection(self, capsys):
        """A short live run injects, diagnoses and prints metrics."""
        code = cli.main([
            "run", "--ticks", "4", "--interval-ms", "1", "--seed", "5",
            "--no-speech", "--inject", "CO2", "--inject-at", "1",
            "--auto-resolve", "1", "--explain", "--metrics",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "NOMINAL -> ANOMALY_INJECTED" in out
        assert "Diagnosis" in out
        assert "Based on the digital twin's causal model" in out
        assert "DIAGNOSED -> NOMINAL" in out
        assert "eclss_guard_telemetry_ticks_total" in out

    @pytest.mark.parametrize("inject_at", ["0", "-1", "5"])
    def test_run_rejects_unreachable_injection_tick(self, capsys, inject_at):
        """An injection tick outside 1..ticks is refused before the loop starts."""
        with pytest.raises(SystemExit) as excinfo:
            cli.main([
                "run", "--ticks", "4", "--interval-ms", "1", "--no-speech",
                "--inject", "CO2", "--inject-at", inject_at,
            ])
        assert excinfo.value.code == 2
        assert "--inject-at must be between 1 and --ticks (4)" in capsys.readouterr().err

    def test_run_with_bad_config(self, capsys, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("telemetry:\n  interval_ms: -1\n")
        assert cli.main(["run", "--config", str(path), "--ticks", "1"]) == 1
        assert "Invalid configuration" in capsys.readouterr().out
