"""Fault model and diagnosis result types."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field


class SymptomLevel(str, Enum):
    """Qualitative level a fault expects on a telemetry field."""

    HIGH = "high"
    LOW = "low"
    NORMAL = "normal"


@dataclass(frozen=True)
class FaultDefinition:
    """
    Static description of a named failure mode.

    Attributes:
        fault_id: Key in the information model
        name: Human readable fault name
        symptoms: Telemetry field → expected qualitative level
        explanation: Causal explanation shown and spoken to the operator
        recommendation: Longer operator guidance
        action: Short recommended action label
    """

    fault_id: str
    name: str
    symptoms: Mapping[str, SymptomLevel]
    explanation: str
    recommendation: str
    action: str

    def __post_init__(self):
        # Freeze the symptom table so shared definitions cannot be mutated.
        object.__setattr__(self, "symptoms", MappingProxyType(dict(self.symptoms)))

    def expects(self, field_name: str, level: SymptomLevel) -> bool:
        return self.symptoms.get(field_name) == level


@dataclass(frozen=True)
class Component:
    """ECLSS component in the information model."""

    component_id: str
    monitors: Tuple[str, ...] = ()
    controls: Tuple[str, ...] = ()
    status: str = ""
    faults: Tuple[str, ...] = ()
    affects: Tuple[str, ...] = ()


class DiagnosisResult(BaseModel):
    """One ranked fault hypothesis."""

    model_config = ConfigDict(frozen=True)

    fault: str = Field(..., description="Fault name")
    probability: float = Field(..., ge=0, le=1, description="Normalized heuristic probability")
    explanation: str = Field(..., description="Causal explanation")
    recommended_action: str = Field(..., description="Short action label")
