"""
Pydantic models for ECLSS cabin telemetry.

This module is the single source of truth for telemetry data structures
across the pipeline: simulator → score engine → diagnosis controller.
"""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnomalyType(str, Enum):
    """Anomaly categories that can be injected into the simulated cabin."""

    CO2 = "CO2"
    O2 = "O2"
    PRESSURE = "PRESSURE"
    WATER = "WATER"

    @property
    def display_name(self) -> str:
        return ANOMALY_DETAILS[self]["name"]

    @property
    def description(self) -> str:
        return ANOMALY_DETAILS[self]["description"]


ANOMALY_DETAILS: Dict[AnomalyType, Dict[str, str]] = {
    AnomalyType.CO2: {
        "name": "CO₂ Spike",
        "description": "Simulates a sudden increase in Carbon Dioxide levels.",
    },
    AnomalyType.O2: {
        "name": "O₂ Drop",
        "description": "Simulates a dangerous drop in Oxygen concentration.",
    },
    AnomalyType.PRESSURE: {
        "name": "Pressure Leak",
        "description": "Simulates a gradual loss of cabin pressure.",
    },
    AnomalyType.WATER: {
        "name": "Water System Failure",
        "description": "Simulates a water recycling fault and level drop.",
    },
}


class TelemetryRecord(BaseModel):
    """
    One cabin telemetry sample.

    Records are immutable once produced. Continuous fields are non-negative;
    the two status fields are boolean-valued integers.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "timestamp": 1768333641190,
                "co2_ppm": 402.1,
                "o2_percent": 20.95,
                "pressure_kPa": 101.31,
                "water_level_percent": 85.4,
                "humidity_percent": 51.2,
                "scrubber_status": 1,
                "airflow_m_s": 5.02,
                "valve_command_status": 1,
            }
        },
    )

    timestamp: int = Field(..., ge=0, description="Sample time (ms since epoch)")
    co2_ppm: float = Field(..., ge=0, description="CO2 concentration in ppm")
    o2_percent: float = Field(..., ge=0, description="Oxygen concentration in %")
    pressure_kPa: float = Field(..., ge=0, description="Cabin pressure in kPa")
    water_level_percent: float = Field(..., ge=0, description="Recycler tank level in %")
    humidity_percent: float = Field(..., ge=0, description="Cabin humidity in %")
    scrubber_status: int = Field(..., description="Scrubber status (1 = OK, 0 = FAULT)")
    airflow_m_s: float = Field(..., ge=0, description="Scrubber airflow in m/s")
    valve_command_status: int = Field(..., description="Commanded valve state (1 = OPEN, 0 = CLOSED)")

    @field_validator("scrubber_status", "valve_command_status")
    @classmethod
    def validate_flag(cls, v, info):
        """Status flags only take the values 0 and 1."""
        if v not in (0, 1):
            raise ValueError(f"{info.field_name} must be 0 or 1, got {v}")
        return v


class ScorePoint(BaseModel):
    """Anomaly score computed for the record with the same timestamp."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(..., ge=0)
    score: float = Field(..., ge=0, le=100)


# Display metadata for the continuous telemetry channels.
PARAMETERS: Dict[str, Dict[str, object]] = {
    "co2_ppm": {"name": "CO₂", "unit": "ppm", "domain": (350, 2000)},
    "o2_percent": {"name": "Oxygen", "unit": "%", "domain": (15, 25)},
    "pressure_kPa": {"name": "Pressure", "unit": "kPa", "domain": (95, 105)},
    "water_level_percent": {"name": "Water Level", "unit": "%", "domain": (0, 100)},
    "humidity_percent": {"name": "Humidity", "unit": "%", "domain": (30, 70)},
    "airflow_m_s": {"name": "Airflow", "unit": "m/s", "domain": (0, 6)},
}
