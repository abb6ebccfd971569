"""Genre reference profiles loaded from JSON.

A reference file maps genre names to profile data. Two layouts are accepted
for each genre and can be mixed:

- native: ``metrics`` (canonical name -> target/tolerance), ``bands``
  (band name -> target_db/tol_db) and ``category_weights``;
- legacy: a ``legacy_compatibility`` block with flat fields such as
  ``lufs_target`` / ``tol_lufs`` and its own ``bands`` map.

Native entries take precedence over legacy ones.
"""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, List

from .config import DEFAULT_CATEGORY_WEIGHTS, GENRE_WEIGHTS, TECHNICAL, TONAL
from .exceptions import ConfigurationError, ReferenceNotFoundError
from .logging_config import get_logger
from .models import DIRECTION_BOTH, DIRECTION_UPPER, BandTarget, MetricTarget, ReferenceProfile
from .validation import validate_profile

logger = get_logger(__name__)

DEFAULT_REFERENCES_PATH = Path(__file__).parent / "data" / "references.json"
REFERENCES_ENV = "MIXSCORE_REFERENCES"

METRIC_UNITS = {
    "lufs_integrated": "LUFS",
    "true_peak_dbtp": "dBTP",
    "dynamic_range": "dB",
    "lra": "LU",
    "crest_factor": "dB",
    "stereo_correlation": "",
    "stereo_width": "",
    "dc_offset": "",
    "clipping_pct": "%",
    "balance_lr": "",
    "thd_percent": "%",
    "spectral_centroid": "Hz",
    "spectral_flatness": "",
    "spectral_rolloff50": "Hz",
    "spectral_rolloff85": "Hz",
}

# Only values above target are a problem for these
UPPER_ONLY_METRICS = {"true_peak_dbtp", "dc_offset", "clipping_pct", "thd_percent"}

# Targets for metrics the genre files do not calibrate.
# Spectral-shape metrics get none, they only count when a profile targets them.
SUPPLEMENTARY_TARGETS = {
    "crest_factor": MetricTarget(target=10.0, tolerance=4.0, unit="dB"),
    "stereo_width": MetricTarget(target=0.6, tolerance=0.25),
    "dc_offset": MetricTarget(target=0.0, tolerance=0.02, direction=DIRECTION_UPPER),
    "clipping_pct": MetricTarget(target=0.0, tolerance=0.5, unit="%", direction=DIRECTION_UPPER),
    "balance_lr": MetricTarget(target=0.0, tolerance=0.2),
    "thd_percent": MetricTarget(target=1.0, tolerance=1.5, unit="%", direction=DIRECTION_UPPER),
}

# canonical metric -> (target, tol, tol_min, tol_max) keys in the legacy block
LEGACY_FIELDS = {
    "lufs_integrated": ("lufs_target", "tol_lufs", "tol_lufs_min", "tol_lufs_max"),
    "true_peak_dbtp": ("true_peak_target", "tol_true_peak", None, None),
    "dynamic_range": ("dr_target", "tol_dr", None, None),
    "lra": ("lra_target", "tol_lra", None, None),
    "stereo_correlation": ("stereo_target", "tol_stereo", None, None),
}

SEVERITY_WEIGHTS = {"soft": 1.0, "hard": 1.5, "critical": 2.0}

CATEGORY_ALIASES = {"artifacts": TECHNICAL, "frequency": TONAL}


def resolve_references_path(path=None) -> Path:
    """Explicit path, else $MIXSCORE_REFERENCES, else the bundled file."""
    if path is None:
        path = os.environ.get(REFERENCES_ENV) or DEFAULT_REFERENCES_PATH
    return Path(path)


def load_references(path=None) -> Dict[str, dict]:
    """Read the raw genre -> profile data mapping from a JSON file.

    Raises:
        ReferenceNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not a JSON object.
    """
    path = resolve_references_path(path)
    if not path.exists():
        raise ReferenceNotFoundError(f"Reference file not found: {path}", field=str(path))

    logger.debug("Loading references from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid reference JSON in {path}: {e}", field=str(path))

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Reference file {path} must contain a JSON object", str(path))
    return dict(data)


def available_genres(path=None) -> List[str]:
    """Sorted genre names in a reference file."""
    return sorted(load_references(path))


def load_profile(genre: str, path=None, fill_defaults: bool = True) -> ReferenceProfile:
    """Load and validate the profile of one genre."""
    references = load_references(path)
    if genre not in references:
        raise ReferenceNotFoundError(
            f"Unknown genre {genre!r}. Available: {', '.join(sorted(references))}", field=genre
        )
    return profile_from_dict(genre, references[genre], fill_defaults=fill_defaults)


def _metric_target(name: str, spec) -> MetricTarget:
    if not isinstance(spec, Mapping):
        raise ConfigurationError(f"Metric {name} must be an object", field=name)
    if "target" not in spec:
        raise ConfigurationError(f"Metric {name} has no target", field=f"{name}.target")
    default_direction = DIRECTION_UPPER if name in UPPER_ONLY_METRICS else DIRECTION_BOTH
    return MetricTarget(
        target=spec["target"],
        tolerance=spec.get("tolerance", spec.get("tol")),
        unit=spec.get("unit", METRIC_UNITS.get(name, "")),
        weight=spec.get("weight", 1.0),
        direction=spec.get("direction", default_direction),
        tolerance_low=spec.get("tolerance_low", spec.get("tol_min")),
        tolerance_high=spec.get("tolerance_high", spec.get("tol_max")),
    )


def _legacy_metrics(legacy: Mapping) -> Dict[str, MetricTarget]:
    metrics = {}
    for name, (target_key, tol_key, low_key, high_key) in LEGACY_FIELDS.items():
        if target_key not in legacy:
            continue
        metrics[name] = MetricTarget(
            target=legacy[target_key],
            tolerance=legacy.get(tol_key),
            unit=METRIC_UNITS[name],
            direction=DIRECTION_UPPER if name in UPPER_ONLY_METRICS else DIRECTION_BOTH,
            tolerance_low=legacy.get(low_key) if low_key else None,
            tolerance_high=legacy.get(high_key) if high_key else None,
        )
    return metrics


def _band_target(band: str, spec) -> BandTarget:
    if not isinstance(spec, Mapping):
        raise ConfigurationError(f"Band {band} must be an object", field=band)
    weight = spec.get("weight")
    if weight is None:
        severity = spec.get("severity", "soft")
        if severity not in SEVERITY_WEIGHTS:
            raise ConfigurationError(f"Unknown severity {severity!r} for band {band}", field=band)
        weight = SEVERITY_WEIGHTS[severity]
    return BandTarget(
        target_db=spec.get("target_db", spec.get("target")),
        tol_db=spec.get("tol_db", spec.get("tolerance")),
        weight=weight,
    )


def _category_weights(genre: str, data: Mapping) -> Dict[str, float]:
    raw = data.get("category_weights")
    if raw is None:
        return dict(GENRE_WEIGHTS.get(genre, DEFAULT_CATEGORY_WEIGHTS))
    if not isinstance(raw, Mapping):
        raise ConfigurationError("category_weights must be an object", field="category_weights")
    return {CATEGORY_ALIASES.get(name, name): weight for name, weight in raw.items()}


def profile_from_dict(genre: str, data, fill_defaults: bool = True) -> ReferenceProfile:
    """Build and validate a ReferenceProfile from one genre's JSON data.

    Args:
        genre: Genre name.
        data: Native and/or legacy profile data.
        fill_defaults: Add SUPPLEMENTARY_TARGETS for metrics the data omits.

    Raises:
        ConfigurationError: If the data is malformed.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Profile for {genre} must be an object", field=genre)

    legacy = data.get("legacy_compatibility")
    if not isinstance(legacy, Mapping):
        legacy = data if "lufs_target" in data else {}

    metrics = _legacy_metrics(legacy)
    native = data.get("metrics", {})
    if not isinstance(native, Mapping):
        raise ConfigurationError("metrics must be an object", field="metrics")
    for name, spec in native.items():
        metrics[name] = _metric_target(name, spec)

    if fill_defaults:
        for name, mt in SUPPLEMENTARY_TARGETS.items():
            if name not in metrics:
                logger.debug("Profile %s: using default target for %s", genre, name)
                metrics[name] = mt

    bands_raw = data.get("bands")
    if not isinstance(bands_raw, Mapping):
        bands_raw = legacy.get("bands", {})
    bands = {str(band): _band_target(band, spec) for band, spec in bands_raw.items()}

    profile = ReferenceProfile(
        genre=genre,
        metrics=metrics,
        bands=bands,
        category_weights=_category_weights(genre, data),
        version=data.get("version"),
    )
    validate_profile(profile)
    return profile


def profile_summary(profile: ReferenceProfile) -> str:
    """One-line description of a profile for listings."""
    lufs = profile.metrics.get("lufs_integrated")
    parts = [profile.genre]
    if lufs is not None:
        parts.append(f"LUFS {lufs.target:g} ±{lufs.tolerance:g}")
    parts.append(f"{len(profile.bands)} bands")
    return ", ".join(parts)
