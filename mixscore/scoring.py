"""Pure scoring functions: tolerance zones, score curves, aggregation and classification."""

import math
from typing import Dict, Optional, Sequence

import numpy as np

from .config import CLASSIFICATION_TIERS, GAUSSIAN, LINEAR
from .exceptions import ConfigurationError, InsufficientDataError
from .logging_config import get_logger
from .models import (
    DECREASE,
    DIRECTION_UPPER,
    INCREASE,
    NA,
    STATUS_ADJUST,
    STATUS_FIX,
    STATUS_IDEAL,
    STATUS_UNAVAILABLE,
    CategoryScore,
    Suggestion,
    ToleranceResult,
    finite_or_na,
    is_available,
)

logger = get_logger(__name__)

# Absolute slack added to n so n == 1.0 and n == 2.0 stay in the lower zone
_BOUNDARY_EPS = 1e-9

# --- Tolerance evaluation ---


def evaluate_tolerance(
    value, target, tolerance, unit: str = "", metric: str = "", direction: str = "both"
) -> ToleranceResult:
    """Classify a value into ideal / adjust / fix by multiples of tolerance.

    Zones: n <= 1 ideal, 1 < n <= 2 adjust, n > 2 fix, where
    n = |value - target| / tolerance. An ideal metric never carries a
    suggestion. With direction="upper" values below target are ideal.

    A non-positive or non-finite tolerance is a configuration problem and is
    reported as unavailable with error="invalid tolerance"; a missing value is
    unavailable with no error.
    """
    tol = finite_or_na(tolerance)
    tgt = finite_or_na(target)
    val = finite_or_na(value)

    if not is_available(tol) or tol <= 0:
        return ToleranceResult(
            metric=metric,
            status=STATUS_UNAVAILABLE,
            value=val,
            target=tgt,
            unit=unit,
            error="invalid tolerance",
        )
    if not is_available(tgt):
        return ToleranceResult(
            metric=metric,
            status=STATUS_UNAVAILABLE,
            value=val,
            tolerance=tol,
            unit=unit,
            error="invalid target",
        )
    if not is_available(val):
        return ToleranceResult(
            metric=metric, status=STATUS_UNAVAILABLE, target=tgt, tolerance=tol, unit=unit
        )

    deviation = val - tgt
    if direction == DIRECTION_UPPER and deviation <= 0:
        n = 0.0
    else:
        n = abs(deviation) / tol

    if n <= 1.0 + _BOUNDARY_EPS:
        status = STATUS_IDEAL
        suggestion = None
    else:
        status = STATUS_ADJUST if n <= 2.0 + _BOUNDARY_EPS else STATUS_FIX
        suggestion = Suggestion(
            metric=metric,
            direction=DECREASE if deviation > 0 else INCREASE,
            magnitude=abs(deviation),
            target=tgt,
            unit=unit,
            urgent=status == STATUS_FIX,
        )

    return ToleranceResult(
        metric=metric,
        status=status,
        value=val,
        target=tgt,
        tolerance=tol,
        deviation=deviation,
        n=n,
        unit=unit,
        suggestion=suggestion,
    )


# --- Score curves ---

_LINEAR_KNOTS = (0.0, 1.0, 2.0, 3.0)


def gaussian_curve(n: float, floor: float = 1.0) -> float:
    """100 * exp(-n^2 / 2), never below floor."""
    return max(floor, 100.0 * math.exp(-0.5 * n * n))


def linear_curve(n: float, floor: float = 15.0) -> float:
    """Piecewise linear: 100 at n=0, 70 at n=1, 40 at n=2, floor from n=3 on."""
    return float(np.interp(n, _LINEAR_KNOTS, (100.0, 70.0, 40.0, floor)))


CURVES = {
    GAUSSIAN: gaussian_curve,
    LINEAR: linear_curve,
}

_CURVE_FLOOR_LIMITS = {
    GAUSSIAN: 100.0,
    LINEAR: 40.0,
}


def validate_curve(curve: str, floor: float):
    """Raise ConfigurationError unless curve is known and floor keeps it decreasing."""
    if curve not in CURVES:
        raise ConfigurationError(f"Unknown scoring curve {curve!r}", field="curve")
    if not math.isfinite(floor) or not 0 < floor < _CURVE_FLOOR_LIMITS[curve]:
        raise ConfigurationError(
            f"Curve floor for {curve} must be in (0, {_CURVE_FLOOR_LIMITS[curve]:g}), got {floor}",
            field="curve_floor",
        )


def score_from_deviation(n: float, curve: str = GAUSSIAN, floor: Optional[float] = None) -> float:
    """Map a tolerance multiple n to a 0-100 score with the named curve."""
    if curve not in CURVES:
        raise ConfigurationError(f"Unknown scoring curve {curve!r}", field="curve")
    func = CURVES[curve]
    if floor is None:
        return func(n)
    return func(n, floor)


# --- Category aggregation ---


def aggregate_category(
    name: str, results: Sequence[ToleranceResult], weights: Optional[Sequence[float]] = None
) -> CategoryScore:
    """Weighted mean of the scores of the available members.

    N/A members are excluded. A category whose members are all N/A is N/A
    itself, never a neutral number.
    """
    if weights is None:
        weights = [r.weight for r in results]
    if len(weights) != len(results):
        raise ValueError("weights must match results")

    scores = []
    member_weights = []
    for result, weight in zip(results, weights):
        if result.available and is_available(result.score):
            scores.append(result.score)
            member_weights.append(weight)

    excluded = len(results) - len(scores)
    if not scores:
        logger.debug("Category %s is N/A (%d members excluded)", name, excluded)
        return CategoryScore(name=name, value=NA, member_count=0, excluded_count=excluded)

    if sum(member_weights) <= 0:
        raise ConfigurationError(f"Category {name} has no positive member weight", field=name)

    value = float(np.average(scores, weights=member_weights))
    logger.debug("Category %s: %.2f from %d members (%d excluded)", name, value, len(scores), excluded)
    return CategoryScore(name=name, value=value, member_count=len(scores), excluded_count=excluded)


# --- Weighted combination ---


def effective_weights(
    categories: Sequence[CategoryScore], weights: Dict[str, float]
) -> Dict[str, float]:
    """Weights of the available categories renormalized to sum to 1.

    Categories absent from weights count as weight 0. Raises
    InsufficientDataError when no available category carries weight.
    """
    for name, weight in weights.items():
        if not math.isfinite(weight) or weight < 0:
            raise ConfigurationError(f"Invalid weight for category {name}: {weight}", field=name)

    present = [c for c in categories if c.available]
    total = sum(weights.get(c.name, 0.0) for c in present)
    if not present or total <= 0:
        raise InsufficientDataError("No weighted category has usable data")
    return {c.name: weights.get(c.name, 0.0) / total for c in present}


def combine_categories(categories: Sequence[CategoryScore], weights: Dict[str, float]) -> float:
    """Weighted average of available category values, skipping N/A categories."""
    eff = effective_weights(categories, weights)
    values = [c.value for c in categories if c.name in eff]
    ws = [eff[c.name] for c in categories if c.name in eff]
    return float(np.dot(values, ws))


# --- Classification ---


def classify(score_pct: float, tiers=CLASSIFICATION_TIERS) -> str:
    """Label for a score from an ordered (minimum, label) table, highest first."""
    for minimum, label in tiers:
        if score_pct >= minimum:
            return label
    return tiers[-1][1]
