"""Domain models for mixscore."""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Dict, List, Optional

from .exceptions import PartialDataWarning

STATUS_IDEAL = "ideal"
STATUS_ADJUST = "adjust"
STATUS_FIX = "fix"
STATUS_UNAVAILABLE = "unavailable"

DIRECTION_BOTH = "both"
DIRECTION_UPPER = "upper"

INCREASE = "increase"
DECREASE = "decrease"


class _NotAvailable:
    """Marker for a value that could not be measured or matched."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "N/A"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_NotAvailable, ())


NA = _NotAvailable()


def is_available(value) -> bool:
    """True unless value is the N/A marker."""
    return value is not NA


def finite_or_na(value):
    """Return value as float when it is a finite real number, else NA.

    Booleans and numeric strings are not measurements and map to NA.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return NA
    value = float(value)
    if not math.isfinite(value):
        return NA
    return value


@dataclass(frozen=True)
class MetricTarget:
    """Target and tolerance for a single metric in a reference profile."""

    target: float
    tolerance: float
    unit: str = ""
    weight: float = 1.0
    direction: str = DIRECTION_BOTH  # "upper": only values above target are penalized
    tolerance_low: Optional[float] = None
    tolerance_high: Optional[float] = None

    def side_tolerance(self, deviation: float) -> float:
        """Tolerance that applies on the side of the given deviation."""
        if deviation < 0 and self.tolerance_low is not None:
            return self.tolerance_low
        if deviation > 0 and self.tolerance_high is not None:
            return self.tolerance_high
        return self.tolerance


@dataclass(frozen=True)
class BandTarget:
    """Target level for a spectral band."""

    target_db: float
    tol_db: float
    weight: float = 1.0

    def as_metric_target(self) -> MetricTarget:
        return MetricTarget(target=self.target_db, tolerance=self.tol_db, unit="dB", weight=self.weight)


@dataclass(frozen=True)
class ReferenceProfile:
    """Genre reference: metric targets, band targets and category weights."""

    genre: str
    metrics: Dict[str, MetricTarget] = field(default_factory=dict)
    bands: Dict[str, BandTarget] = field(default_factory=dict)
    category_weights: Dict[str, float] = field(default_factory=dict)
    version: Optional[str] = None


@dataclass(frozen=True)
class BandMeasurement:
    """Measured level and energy share of a spectral band."""

    level_db: object = NA
    energy_fraction: object = NA


@dataclass(frozen=True)
class TechnicalMeasurement:
    """Canonical technical data for one track. Every field is a float or NA."""

    lufs_integrated: object = NA  # LUFS
    true_peak_dbtp: object = NA  # dBTP
    dynamic_range: object = NA  # dB
    lra: object = NA  # LU
    crest_factor: object = NA  # dB
    stereo_correlation: object = NA  # -1..1
    stereo_width: object = NA  # 0..1
    balance_lr: object = NA  # -1 (left) .. 1 (right)
    dc_offset: object = NA  # absolute, linear
    clipping_pct: object = NA  # percent of samples
    thd_percent: object = NA  # percent
    spectral_centroid: object = NA  # Hz
    spectral_flatness: object = NA  # 0..1
    spectral_rolloff50: object = NA  # Hz
    spectral_rolloff85: object = NA  # Hz
    bands: Dict[str, BandMeasurement] = field(default_factory=dict)
    extras: Dict[str, object] = field(default_factory=dict)

    def get(self, name: str):
        """Value of a canonical metric, or of a band level as ``band_<name>``."""
        if name.startswith("band_") and name[5:] in self.bands:
            return self.bands[name[5:]].level_db
        return getattr(self, name, NA)


@dataclass(frozen=True)
class Suggestion:
    """Directional correction for a metric outside its ideal zone."""

    metric: str
    direction: str  # increase or decrease
    magnitude: float
    target: float
    unit: str = ""
    urgent: bool = False

    @property
    def arrow(self) -> str:
        arrow = "↑" if self.direction == INCREASE else "↓"
        return arrow * 2 if self.urgent else arrow

    @property
    def text(self) -> str:
        unit = f" {self.unit}" if self.unit else ""
        return (
            f"{self.direction.capitalize()} {self.metric} by {self.magnitude:.2f}{unit} "
            f"to reach {self.target:g}{unit}"
        )


@dataclass(frozen=True)
class ToleranceResult:
    """Status of one metric against its target."""

    metric: str
    status: str
    value: object = NA
    target: object = NA
    tolerance: object = NA
    deviation: object = NA  # value - target
    n: object = NA  # |deviation| / tolerance
    unit: str = ""
    category: str = ""
    weight: float = 1.0
    score: object = NA  # 0-100
    suggestion: Optional[Suggestion] = None
    error: Optional[str] = None  # set when unavailable because of configuration

    @property
    def available(self) -> bool:
        return self.status != STATUS_UNAVAILABLE


@dataclass(frozen=True)
class CategoryScore:
    """Aggregated score of a metric category."""

    name: str
    value: object  # 0-100 or NA
    member_count: int
    excluded_count: int
    weight: float = 0.0  # effective weight after renormalization

    @property
    def available(self) -> bool:
        return is_available(self.value)


@dataclass(frozen=True)
class GateHit:
    """A quality gate that capped the final score."""

    name: str
    metric: str
    value: float
    threshold: float
    max_score: float
    message: str


@dataclass(frozen=True)
class Recommendation:
    """A prioritized improvement suggestion."""

    metric: str
    category: str
    suggestion: Suggestion
    impact: float
    priority: str  # high, medium, low


@dataclass
class ScoreResult:
    """Final mix score with its full breakdown."""

    score_pct: float
    raw_score: float
    classification: str
    per_category: List[CategoryScore]
    per_metric: List[ToleranceResult]
    applied_gates: List[GateHit] = field(default_factory=list)
    excluded_metrics: List[str] = field(default_factory=list)
    excluded_categories: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)
    highlights: Dict[str, List[str]] = field(default_factory=dict)
    genre: Optional[str] = None
    curve: str = "gaussian"

    @property
    def partial(self) -> bool:
        """True when some data was missing and left out of the score."""
        return bool(self.excluded_metrics or self.excluded_categories)

    def partial_data_warning(self) -> Optional[PartialDataWarning]:
        if not self.partial:
            return None
        return PartialDataWarning(self.excluded_metrics, self.excluded_categories)

    def category(self, name: str) -> Optional[CategoryScore]:
        for cat in self.per_category:
            if cat.name == name:
                return cat
        return None

    def metric(self, name: str) -> Optional[ToleranceResult]:
        for m in self.per_metric:
            if m.metric == name:
                return m
        return None

    def to_dict(self) -> dict:
        """JSON-serializable view. N/A values become null with available=false."""
        return {
            "score_pct": self.score_pct,
            "raw_score": self.raw_score,
            "classification": self.classification,
            "genre": self.genre,
            "curve": self.curve,
            "per_category": [
                {
                    "name": c.name,
                    "available": c.available,
                    "value": _json_number(c.value),
                    "weight": c.weight,
                    "member_count": c.member_count,
                    "excluded_count": c.excluded_count,
                }
                for c in self.per_category
            ],
            "per_metric": [_metric_dict(m) for m in self.per_metric],
            "applied_gates": [
                {
                    "name": g.name,
                    "metric": g.metric,
                    "value": g.value,
                    "threshold": g.threshold,
                    "max_score": g.max_score,
                    "message": g.message,
                }
                for g in self.applied_gates
            ],
            "excluded_metrics": list(self.excluded_metrics),
            "excluded_categories": list(self.excluded_categories),
            "warnings": list(self.warnings),
            "recommendations": [
                {
                    "metric": r.metric,
                    "category": r.category,
                    "priority": r.priority,
                    "impact": r.impact,
                    "text": r.suggestion.text,
                }
                for r in self.recommendations
            ],
            "highlights": {k: list(v) for k, v in self.highlights.items()},
        }


def _json_number(value):
    return value if is_available(value) else None


def _metric_dict(m: ToleranceResult) -> dict:
    suggestion = None
    if m.suggestion is not None:
        suggestion = {
            "direction": m.suggestion.direction,
            "magnitude": m.suggestion.magnitude,
            "unit": m.suggestion.unit,
            "urgent": m.suggestion.urgent,
            "text": m.suggestion.text,
        }
    return {
        "metric": m.metric,
        "category": m.category,
        "status": m.status,
        "available": m.available,
        "value": _json_number(m.value),
        "target": _json_number(m.target),
        "tolerance": _json_number(m.tolerance),
        "deviation": _json_number(m.deviation),
        "score": _json_number(m.score),
        "unit": m.unit,
        "suggestion": suggestion,
        "error": m.error,
    }
