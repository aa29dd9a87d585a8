"""
ECLSS information model.

Describes the life-support components, the telemetry they monitor and
control, and the fault modes attached to each of them. The tables are built
once at import time and exposed as read-only mappings.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from ..schemas.diagnosis import Component, FaultDefinition, SymptomLevel
from ..schemas.telemetry import AnomalyType

HIGH = SymptomLevel.HIGH
LOW = SymptomLevel.LOW
NORMAL = SymptomLevel.NORMAL


COMPONENTS: Mapping[str, Component] = MappingProxyType({
    c.component_id: c
    for c in (
        Component(
            "ECLSS",
            affects=("CO2Scrubber", "OxygenGenerator", "WaterRecycler", "CabinPressureControl"),
        ),
        Component(
            "CO2Scrubber",
            monitors=("co2_ppm", "airflow_m_s"),
            controls=("valve_command_status",),
            status="scrubber_status",
            faults=("ScrubberValveStuck", "ScrubberSensorDrift"),
        ),
        Component("OxygenGenerator", monitors=("o2_percent",), faults=("O2SupplyLeak",)),
        Component("CabinPressureControl", monitors=("pressure_kPa",), faults=("HullBreach",)),
        Component(
            "WaterRecycler",
            monitors=("water_level_percent", "humidity_percent"),
            faults=("FiltrationFault",),
        ),
    )
})


FAULTS: Mapping[str, FaultDefinition] = MappingProxyType({
    f.fault_id: f
    for f in (
        FaultDefinition(
            fault_id="ScrubberValveStuck",
            name="Scrubber Valve Stuck",
            symptoms={"co2_ppm": HIGH, "airflow_m_s": LOW, "valve_command_status": HIGH},
            explanation=(
                "The scrubber valve is commanded open, but airflow is low, "
                "preventing CO2 removal."
            ),
            recommendation="Cycle the scrubber valve immediately",
            action="Cycle Valve",
        ),
        FaultDefinition(
            fault_id="ScrubberSensorDrift",
            name="CO2 Sensor Drift",
            symptoms={"co2_ppm": HIGH, "airflow_m_s": NORMAL},
            explanation=(
                "The CO2 sensor is reading high, but other related telemetry "
                "(like airflow) appears normal."
            ),
            recommendation="Cross-reference with secondary sensors and recalibrate",
            action="Recalibrate Sensor",
        ),
        FaultDefinition(
            fault_id="O2SupplyLeak",
            name="O2 Supply Leak",
            symptoms={"o2_percent": LOW},
            explanation=(
                "A steady drop in oxygen points to a leak in the supply line "
                "or a faulty regulator."
            ),
            recommendation="Activate reserve oxygen tank and locate the leak",
            action="Activate Reserve O₂",
        ),
        FaultDefinition(
            fault_id="HullBreach",
            name="Potential Hull Breach",
            symptoms={"pressure_kPa": LOW},
            explanation=(
                "A continuous pressure drop is a critical indicator of a "
                "possible hull breach or seal failure."
            ),
            recommendation="Isolate cabin section and verify suit integrity immediately",
            action="Isolate Section",
        ),
        FaultDefinition(
            fault_id="FiltrationFault",
            name="Water Filtration Fault",
            symptoms={"water_level_percent": LOW, "humidity_percent": LOW},
            explanation=(
                "Low water levels combined with a recycling system fault "
                "indicate a failure in water processing."
            ),
            recommendation="Switch to backup water supply and restart the recycler",
            action="Switch to Backup Water",
        ),
    )
})


# Anomaly category → component whose fault modes are candidates.
CATEGORY_COMPONENTS: Mapping[AnomalyType, str] = MappingProxyType({
    AnomalyType.CO2: "CO2Scrubber",
    AnomalyType.O2: "OxygenGenerator",
    AnomalyType.PRESSURE: "CabinPressureControl",
    AnomalyType.WATER: "WaterRecycler",
})


def candidate_faults(category) -> Tuple[str, ...]:
    """
    Fault ids to consider for an anomaly category, in table order.

    Unknown categories yield an empty tuple.
    """
    try:
        category = AnomalyType(category)
    except ValueError:
        return ()
    return COMPONENTS[CATEGORY_COMPONENTS[category]].faults


def component_for_fault(fault_id: str) -> str:
    """Return the id of the component owning ``fault_id`` (empty if none)."""
    for component in COMPONENTS.values():
        if fault_id in component.faults:
            return component.component_id
    return ""


def fault_by_name(name: str):
    """Return the FaultDefinition with display ``name``, or None."""
    for fault in FAULTS.values():
        if fault.name == name:
            return fault
    return None
