"""Tests for the synthetic cabin telemetry simulator."""

import math

import pytest

from eclss_guard.schemas import AnomalyType
from eclss_guard.simulator import PROFILES, TelemetrySimulator, nominal_values, profile_for


class TestNominalTelemetry:
    def test_noise_free_matches_nominal(self, simulator):
        """Without noise or anomaly a tick is the nominal signal."""
        record = simulator.generate(50_000)
        expected = nominal_values(50_000)
        assert record.co2_ppm == pytest.approx(expected["co2_ppm"])
        assert record.o2_percent == pytest.approx(expected["o2_percent"])
        assert record.airflow_m_s == pytest.approx(expected["airflow_m_s"])
        assert record.scrubber_status == 1
        assert record.valve_command_status == 1

    def test_seeded_noise_is_reproducible(self):
        """Two simulators with one seed produce the same stream."""
        a = TelemetrySimulator(seed=42)
        b = TelemetrySimulator(seed=42)
        for t in range(0, 5000, 1000):
            assert a.generate(t) == b.generate(t)

    def test_noise_is_bounded(self):
        """Noise stays inside its half-span around the nominal value."""
        sim = TelemetrySimulator(seed=1)
        for t in range(0, 20_000, 1000):
            record = sim.generate(t)
            assert abs(record.co2_ppm - nominal_values(t)["co2_ppm"]) <= 0.5
            assert abs(record.o2_percent - nominal_values(t)["o2_percent"]) <= 0.025

    def test_initial_history(self, simulator):
        """History ends at now, is evenly spaced and primes the last record."""
        history = simulator.initial_history(now_ms=100_000, length=5, interval_ms=1000)
        assert [r.timestamp for r in history] == [96_000, 97_000, 98_000, 99_000, 100_000]
        assert history[-1].co2_ppm == pytest.approx(nominal_values(100_000)["co2_ppm"])
        assert simulator.last_record == history[-1]


class TestAnomalyProfiles:
    def test_co2_spike(self, simulator):
        """CO2 climbs, airflow collapses, valve stays open, scrubber faults."""
        simulator.inject_anomaly(AnomalyType.CO2, start_ms=0)
        record = simulator.generate(30_000)
        nominal = nominal_values(30_000)
        assert record.co2_ppm == pytest.approx(nominal["co2_ppm"] + 1200 * (1 - math.exp(-6)))
        assert record.airflow_m_s < 2.0
        assert record.valve_command_status == 1
        assert record.scrubber_status == 0

    def test_o2_drop(self, simulator):
        simulator.inject_anomaly("O2", start_ms=0)
        record = simulator.generate(10_000)
        expected = nominal_values(10_000)["o2_percent"] - 4 * (1 - math.exp(-1))
        assert record.o2_percent == pytest.approx(expected)

    def test_pressure_leak_is_linear(self, simulator):
        simulator.inject_anomaly(AnomalyType.PRESSURE, start_ms=1000)
        record = simulator.generate(11_000)
        assert record.pressure_kPa == pytest.approx(nominal_values(11_000)["pressure_kPa"] - 2.0)

    def test_values_clamped_non_negative(self, simulator):
        """A long leak cannot drive pressure below zero."""
        simulator.inject_anomaly(AnomalyType.PRESSURE, start_ms=0)
        assert simulator.generate(2_000_000).pressure_kPa == 0.0

    def test_water_drains_from_previous_level(self, simulator):
        """Each tick drains the tank from where the last tick left it."""
        simulator.initial_history(0, 1, 1000)
        simulator.inject_anomaly(AnomalyType.WATER, start_ms=0)
        levels = [simulator.generate(t * 1000).water_level_percent for t in range(1, 20)]
        assert all(b < a for a, b in zip(levels, levels[1:]))
        assert levels[0] < 85.0

    def test_water_recovers_after_clear(self, simulator):
        """After a water fault the level refills by 0.05 per tick."""
        simulator.initial_history(0, 1, 1000)
        simulator.inject_anomaly(AnomalyType.WATER, start_ms=0)
        for t in range(1, 40):
            simulator.generate(t * 1000)
        simulator.clear_anomaly()
        low = simulator.last_record.water_level_percent
        assert low < 84.0
        assert simulator.generate(40_000).water_level_percent == pytest.approx(low + 0.05)
        assert simulator.active_anomaly is None

    def test_injection_replaces_profile(self, simulator):
        simulator.inject_anomaly("CO2", 0)
        simulator.inject_anomaly("O2", 0)
        assert simulator.active_anomaly is AnomalyType.O2

    def test_unknown_category(self, simulator):
        with pytest.raises(ValueError):
            simulator.inject_anomaly("RADIATION", 0)
        with pytest.raises(ValueError):
            profile_for("RADIATION")

    def test_one_profile_per_category(self):
        assert set(PROFILES) == set(AnomalyType)
