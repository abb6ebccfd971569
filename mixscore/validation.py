"""Reference profile validation and measurement plausibility checks."""

import math
from typing import Dict, List

from .config import CATEGORIES, METRIC_CATEGORIES
from .exceptions import ConfigurationError
from .logging_config import get_logger
from .models import (
    DIRECTION_BOTH,
    DIRECTION_UPPER,
    ReferenceProfile,
    TechnicalMeasurement,
    is_available,
)

logger = get_logger(__name__)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _require_positive(value, field: str):
    if not _is_number(value) or value <= 0:
        raise ConfigurationError(f"{field} must be a positive finite number, got {value!r}", field)


def validate_weights(weights: Dict[str, float]):
    """Category weights must be finite, non-negative, known, with a positive total."""
    if not weights:
        raise ConfigurationError("Category weights are empty", field="category_weights")
    for name, weight in weights.items():
        if name not in CATEGORIES:
            raise ConfigurationError(f"Unknown category {name!r} in weights", field=name)
        if not _is_number(weight) or weight < 0:
            raise ConfigurationError(f"Invalid weight for category {name}: {weight!r}", field=name)
    total = sum(weights.values())
    if total <= 0:
        raise ConfigurationError("Category weights must sum to a positive total", "category_weights")
    if abs(total - 1.0) > 1e-6:
        logger.debug("Category weights sum to %.4f, renormalizing", total)


def validate_profile(profile: ReferenceProfile, check_weights: bool = True):
    """Raise ConfigurationError for any malformed target, tolerance or weight.

    Pass ``check_weights=False`` when the caller overrides the profile's
    category weights, so only the weights actually used are checked.
    """
    for name, mt in profile.metrics.items():
        if name not in METRIC_CATEGORIES:
            logger.warning("Profile %s has unsupported metric %s, ignoring", profile.genre, name)
            continue
        if not _is_number(mt.target):
            raise ConfigurationError(f"{name}.target must be a finite number", f"{name}.target")
        _require_positive(mt.tolerance, f"{name}.tolerance")
        if mt.tolerance_low is not None:
            _require_positive(mt.tolerance_low, f"{name}.tolerance_low")
        if mt.tolerance_high is not None:
            _require_positive(mt.tolerance_high, f"{name}.tolerance_high")
        _require_positive(mt.weight, f"{name}.weight")
        if mt.direction not in (DIRECTION_BOTH, DIRECTION_UPPER):
            raise ConfigurationError(
                f"{name}.direction must be 'both' or 'upper', got {mt.direction!r}",
                f"{name}.direction",
            )

    for band, bt in profile.bands.items():
        if not _is_number(bt.target_db):
            raise ConfigurationError(f"band {band}.target_db must be finite", f"{band}.target_db")
        _require_positive(bt.tol_db, f"{band}.tol_db")
        _require_positive(bt.weight, f"{band}.weight")

    if check_weights:
        validate_weights(profile.category_weights)


def check_invariants(m: TechnicalMeasurement) -> List[str]:
    """Plausibility warnings for a measurement. They never change the score."""
    warnings = []
    lufs = m.lufs_integrated
    peak = m.true_peak_dbtp

    if is_available(lufs) and not -60.0 <= lufs <= -1.0:
        warnings.append(f"Integrated loudness {lufs:g} LUFS is outside the plausible range -60..-1")
    if is_available(peak) and peak > 0.0:
        warnings.append(f"True peak {peak:g} dBTP is above 0 dBTP (potential clipping)")
    if is_available(m.clipping_pct):
        if not 0.0 <= m.clipping_pct <= 100.0:
            warnings.append(f"Clipping percentage {m.clipping_pct:g} is outside 0..100")
        elif m.clipping_pct > 0 and is_available(peak) and peak <= -3.0:
            warnings.append("Clipping reported while true peak is at or below -3 dBTP")
    if is_available(m.lra) and is_available(m.dynamic_range) and m.lra > m.dynamic_range + 10:
        warnings.append("Loudness range is far above dynamic range")
    if is_available(m.stereo_correlation) and not -1.0 <= m.stereo_correlation <= 1.0:
        warnings.append(f"Stereo correlation {m.stereo_correlation:g} is outside -1..1")
    if is_available(m.balance_lr) and not -1.0 <= m.balance_lr <= 1.0:
        warnings.append(f"Left/right balance {m.balance_lr:g} is outside -1..1")

    fractions = [b.energy_fraction for b in m.bands.values()]
    if fractions and all(is_available(f) for f in fractions) and sum(fractions) > 1.05:
        warnings.append("Band energy fractions sum to more than 1")

    for w in warnings:
        logger.warning("Invariant: %s", w)
    return warnings
