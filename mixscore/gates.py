"""Quality gates: hard score ceilings for critical technical defects."""

import operator
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .exceptions import ConfigurationError
from .logging_config import get_logger
from .models import NA, GateHit, TechnicalMeasurement, is_available
from .normalizer import normalize

logger = get_logger(__name__)

_COMPARATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


@dataclass(frozen=True)
class GateDefinition:
    """Caps the score at max_score when `metric <comparison> threshold` holds."""

    name: str
    metric: str
    threshold: float
    max_score: float
    comparison: str = ">"
    absolute: bool = False  # compare |value|
    description: str = ""


DEFAULT_GATES = (
    GateDefinition(
        "true_peak_clipping", "true_peak_dbtp", -0.1, 40.0, description="True peak above -0.1 dBTP"
    ),
    GateDefinition(
        "clipping_excessive", "clipping_pct", 10.0, 40.0, description="Excessive clipping"
    ),
    GateDefinition("clipping", "clipping_pct", 1.0, 60.0, description="Clipping above 1%"),
    GateDefinition(
        "dc_offset_high", "dc_offset", 0.05, 60.0, absolute=True, description="High DC offset"
    ),
    GateDefinition(
        "dc_offset", "dc_offset", 0.01, 75.0, absolute=True, description="Moderate DC offset"
    ),
    GateDefinition(
        "dynamics_crushed",
        "lra",
        1.0,
        75.0,
        comparison="<",
        description="Loudness range below 1 LU",
    ),
)


def validate_gate(gate: GateDefinition):
    """Raise ConfigurationError for an unknown comparison operator."""
    if gate.comparison not in _COMPARATORS:
        raise ConfigurationError(
            f"Unknown gate comparison {gate.comparison!r} in gate {gate.name}", field=gate.name
        )


def gate_value(gate: GateDefinition, measurement: TechnicalMeasurement):
    """The measurement a gate inspects, or NA."""
    value = measurement.get(gate.metric)
    if not is_available(value):
        return NA
    return abs(value) if gate.absolute else value


def gate_triggered(gate: GateDefinition, measurement: TechnicalMeasurement) -> bool:
    """Check a single gate. Never triggers on N/A measurements."""
    validate_gate(gate)
    compare = _COMPARATORS[gate.comparison]
    value = gate_value(gate, measurement)
    if not is_available(value):
        return False
    return compare(value, gate.threshold)


def apply_gates(
    raw_score: float, measurement, gate_defs: Sequence[GateDefinition]
) -> Tuple[float, List[GateHit]]:
    """Cap raw_score by the ceiling of every triggered gate.

    Returns (final_score, applied_gates). Gates only ever lower the score.
    """
    measurement = normalize(measurement)
    final_score = raw_score
    hits = []
    for gate in gate_defs:
        if not gate_triggered(gate, measurement):
            continue
        value = gate_value(gate, measurement)
        label = gate.description or gate.name
        message = (
            f"{label}: {gate.metric} {value:g} {gate.comparison} {gate.threshold:g}, "
            f"score capped at {gate.max_score:g}"
        )
        hits.append(
            GateHit(
                name=gate.name,
                metric=gate.metric,
                value=value,
                threshold=gate.threshold,
                max_score=gate.max_score,
                message=message,
            )
        )
        final_score = min(final_score, gate.max_score)
        logger.info("Quality gate %s applied: %s", gate.name, message)
    return final_score, hits
