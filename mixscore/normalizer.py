"""Map raw technical data with alias spellings onto the canonical measurement."""

from collections.abc import Mapping

from .logging_config import get_logger
from .models import NA, BandMeasurement, TechnicalMeasurement, finite_or_na, is_available

logger = get_logger(__name__)

# Canonical name first, then accepted aliases in resolution order
METRIC_ALIASES = {
    "lufs_integrated": ("lufs_integrated", "lufsIntegrated", "integrated_lufs", "lufs"),
    "true_peak_dbtp": ("true_peak_dbtp", "truePeakDbtp", "truePeak", "true_peak", "truePeakDb"),
    "dynamic_range": ("dynamic_range", "tt_dr", "dr_stat", "dynamicRange", "dr"),
    "lra": ("lra", "loudness_range", "loudnessRange", "LRA"),
    "crest_factor": ("crest_factor", "crestFactor"),
    "stereo_correlation": ("stereo_correlation", "stereoCorrelation", "correlation"),
    "stereo_width": ("stereo_width", "stereoWidth", "width"),
    "balance_lr": ("balance_lr", "balanceLR", "balance"),
    "dc_offset": ("dc_offset", "dcOffset"),
    "clipping_pct": ("clipping_pct", "clippingPct", "clippingPercent", "clipping_percent"),
    "thd_percent": ("thd_percent", "thdPercent", "thd"),
    "spectral_centroid": ("spectral_centroid", "spectralCentroid", "centroid"),
    "spectral_flatness": ("spectral_flatness", "spectralFlatness"),
    "spectral_rolloff50": ("spectral_rolloff50", "spectralRolloff50", "rolloff50"),
    "spectral_rolloff85": ("spectral_rolloff85", "spectralRolloff85", "rolloff85"),
}

DC_CHANNEL_KEYS = ("dc_offset_left", "dcOffsetLeft", "dc_offset_right", "dcOffsetRight")

BAND_CONTAINER_ALIASES = (
    "bands",
    "band_energies",
    "bandEnergies",
    "spectral_bands",
    "tonal_balance",
    "tonalBalance",
)
BAND_LEVEL_ALIASES = ("level_db", "levelDb", "rms_db", "rmsDb")
BAND_FRACTION_ALIASES = ("energy_fraction", "energyFraction")
BAND_PERCENT_ALIASES = ("energy_pct", "energyPct")
BAND_RAW_ENERGY = "energy"

ENVELOPE_KEYS = ("technical_data", "technicalData")


def _first_finite(raw: Mapping, aliases):
    for alias in aliases:
        value = finite_or_na(raw.get(alias))
        if is_available(value):
            return value
    return NA


def resolve_metric(raw: Mapping, name: str):
    """Resolve one canonical metric from raw data, NA when no alias is finite."""
    value = _first_finite(raw, METRIC_ALIASES[name])
    if name == "dc_offset":
        if not is_available(value):
            channels = [finite_or_na(raw.get(k)) for k in DC_CHANNEL_KEYS]
            channels = [abs(v) for v in channels if is_available(v)]
            value = max(channels) if channels else NA
        else:
            value = abs(value)
    return value


def _normalize_band(entry):
    if not isinstance(entry, Mapping):
        # A bare number is a band level
        return BandMeasurement(level_db=finite_or_na(entry))

    level = _first_finite(entry, BAND_LEVEL_ALIASES)
    fraction = _first_finite(entry, BAND_FRACTION_ALIASES)
    if not is_available(fraction):
        pct = _first_finite(entry, BAND_PERCENT_ALIASES)
        if is_available(pct):
            fraction = pct / 100.0
    return BandMeasurement(level_db=level, energy_fraction=fraction)


def normalize_bands(raw: Mapping):
    """Canonical band map from the first band container found in raw."""
    container = None
    for alias in BAND_CONTAINER_ALIASES:
        if isinstance(raw.get(alias), Mapping):
            container = raw[alias]
            break
    if container is None:
        return {}

    bands = {str(name): _normalize_band(entry) for name, entry in container.items()}

    # Derive energy shares from raw band energies where no share was given
    raw_energy = {}
    for name, entry in container.items():
        if isinstance(entry, Mapping):
            energy = finite_or_na(entry.get(BAND_RAW_ENERGY))
            if is_available(energy) and energy >= 0:
                raw_energy[str(name)] = energy
    total = sum(raw_energy.values())
    if total > 0:
        for name, energy in raw_energy.items():
            if not is_available(bands[name].energy_fraction):
                bands[name] = BandMeasurement(
                    level_db=bands[name].level_db, energy_fraction=energy / total
                )
    return bands


def _known_keys():
    keys = set(DC_CHANNEL_KEYS) | set(BAND_CONTAINER_ALIASES) | set(ENVELOPE_KEYS)
    for aliases in METRIC_ALIASES.values():
        keys.update(aliases)
    return keys


_KNOWN_KEYS = _known_keys()


def normalize(raw) -> TechnicalMeasurement:
    """Build a TechnicalMeasurement from a raw technical-data record.

    Unknown keys are kept in ``extras``. Any recognized field that is not a
    finite number becomes NA, never 0.
    """
    if isinstance(raw, TechnicalMeasurement):
        return raw
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise TypeError(f"Technical data must be a mapping, got {type(raw).__name__}")

    for key in ENVELOPE_KEYS:
        if isinstance(raw.get(key), Mapping):
            merged = {k: v for k, v in raw.items() if k != key}
            merged.update(raw[key])
            raw = merged
            break

    values = {name: resolve_metric(raw, name) for name in METRIC_ALIASES}
    missing = [name for name, value in values.items() if not is_available(value)]
    if missing:
        logger.debug("Metrics not available: %s", ", ".join(missing))

    extras = {k: v for k, v in raw.items() if k not in _KNOWN_KEYS}
    return TechnicalMeasurement(bands=normalize_bands(raw), extras=extras, **values)
