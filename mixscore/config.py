"""Configuration for mixscore scoring runs."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .gates import DEFAULT_GATES, GateDefinition

# Metric categories
LOUDNESS = "loudness"
DYNAMICS = "dynamics"
PEAK = "peak"
TONAL = "tonal"
STEREO = "stereo"
TECHNICAL = "technical"
SPECTRAL = "spectral"

CATEGORIES = (LOUDNESS, DYNAMICS, PEAK, TONAL, STEREO, TECHNICAL, SPECTRAL)

# Canonical metric -> category. Spectral bands always belong to TONAL.
# SPECTRAL carries no default weight, so spectral-shape metrics only count
# when a profile weights them.
METRIC_CATEGORIES = {
    "lufs_integrated": LOUDNESS,
    "dynamic_range": DYNAMICS,
    "lra": DYNAMICS,
    "crest_factor": DYNAMICS,
    "true_peak_dbtp": PEAK,
    "stereo_correlation": STEREO,
    "stereo_width": STEREO,
    "balance_lr": STEREO,
    "dc_offset": TECHNICAL,
    "clipping_pct": TECHNICAL,
    "thd_percent": TECHNICAL,
    "spectral_centroid": SPECTRAL,
    "spectral_flatness": SPECTRAL,
    "spectral_rolloff50": SPECTRAL,
    "spectral_rolloff85": SPECTRAL,
}

DEFAULT_CATEGORY_WEIGHTS = {
    LOUDNESS: 0.25,
    DYNAMICS: 0.15,
    PEAK: 0.15,
    TONAL: 0.25,
    STEREO: 0.10,
    TECHNICAL: 0.10,
}

GENRE_WEIGHTS = {
    "funk_mandela": DEFAULT_CATEGORY_WEIGHTS,
    "funk_bruxaria": DEFAULT_CATEGORY_WEIGHTS,
    "eletronico": {
        LOUDNESS: 0.20,
        DYNAMICS: 0.20,
        PEAK: 0.10,
        TONAL: 0.20,
        STEREO: 0.15,
        TECHNICAL: 0.15,
    },
    "funk_automotivo": {
        LOUDNESS: 0.30,
        DYNAMICS: 0.10,
        PEAK: 0.20,
        TONAL: 0.25,
        STEREO: 0.05,
        TECHNICAL: 0.10,
    },
}

# Ordered (minimum score, label), highest first
CLASSIFICATION_TIERS = (
    (90.0, "Reference-grade"),
    (75.0, "Advanced"),
    (60.0, "Intermediate"),
    (0.0, "Basic"),
)

GAUSSIAN = "gaussian"
LINEAR = "linear"


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring strategy for one run. Passed explicitly, never global."""

    # Per-metric scoring curve: "gaussian" or "linear"
    curve: str = GAUSSIAN

    # Lowest per-metric score each curve can produce
    gaussian_floor: float = 1.0
    linear_floor: float = 15.0

    # Quality gates
    gates: Tuple[GateDefinition, ...] = DEFAULT_GATES
    apply_gates: bool = True

    # Overrides the profile's category weights when set
    category_weights: Optional[Dict[str, float]] = None

    classification_tiers: Tuple[Tuple[float, str], ...] = CLASSIFICATION_TIERS

    # Reporting
    recommendation_limit: int = 3
    check_invariants: bool = True

    @property
    def curve_floor(self) -> float:
        return self.linear_floor if self.curve == LINEAR else self.gaussian_floor


# Default configuration instance
DEFAULT_CONFIG = ScoringConfig()
