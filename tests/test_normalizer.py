"""Tests for technical-data normalization."""

import pytest

from mixscore.models import NA, TechnicalMeasurement
from mixscore.normalizer import METRIC_ALIASES, normalize, resolve_metric


class TestAliases:
    @pytest.mark.parametrize("alias", METRIC_ALIASES["lufs_integrated"])
    def test_lufs_aliases(self, alias):
        assert normalize({alias: -14.2}).lufs_integrated == -14.2

    def test_true_peak_camel_case(self):
        assert normalize({"truePeakDbtp": -1.3}).true_peak_dbtp == -1.3

    def test_dynamic_range_aliases(self):
        assert normalize({"tt_dr": 7}).dynamic_range == 7.0
        assert normalize({"dynamicRange": 9.5}).dynamic_range == 9.5

    def test_tt_dr_preferred_over_legacy_dynamic_range(self):
        m = normalize({"dynamicRange": 12.0, "dr_stat": 9.0, "tt_dr": 8.0})
        assert m.dynamic_range == 8.0
        assert normalize({"dynamicRange": 12.0, "dr_stat": 9.0}).dynamic_range == 9.0
        assert normalize({"dynamicRange": 12.0, "tt_dr": None}).dynamic_range == 12.0

    def test_thd_and_balance_aliases(self):
        m = normalize({"thdPercent": 2.5, "balanceLR": -0.3})
        assert m.thd_percent == 2.5
        assert m.balance_lr == -0.3
        assert m.extras == {}

    def test_spectral_shape_aliases(self):
        m = normalize(
            {"spectralCentroid": 2400, "spectralFlatness": 0.3, "rolloff50": 2900.0, "spectralRolloff85": 8100.0}
        )
        assert m.spectral_centroid == 2400.0
        assert m.spectral_flatness == 0.3
        assert m.spectral_rolloff50 == 2900.0
        assert m.spectral_rolloff85 == 8100.0

    def test_canonical_name_wins(self):
        m = normalize({"lufs_integrated": -10.0, "lufs": -12.0})
        assert m.lufs_integrated == -10.0

    def test_first_finite_alias_is_used(self):
        m = normalize({"lufs_integrated": None, "lufs": -12.0})
        assert m.lufs_integrated == -12.0

    def test_ints_become_floats(self):
        value = normalize({"lra": 6}).lra
        assert isinstance(value, float)
        assert value == 6.0


class TestMissingValues:
    @pytest.mark.parametrize("value", [None, "loud", float("nan"), float("inf"), True, [1, 2]])
    def test_unusable_values_are_na(self, value):
        assert normalize({"lufs": value}).lufs_integrated is NA

    def test_absent_metrics_are_na_not_zero(self):
        m = normalize({})
        assert m.lufs_integrated is NA
        assert m.clipping_pct is NA
        assert m.bands == {}

    def test_none_input(self):
        assert normalize(None) == TechnicalMeasurement()

    def test_non_mapping_input(self):
        with pytest.raises(TypeError):
            normalize([1, 2, 3])

    def test_measurement_passes_through(self):
        m = TechnicalMeasurement(lufs_integrated=-9.0)
        assert normalize(m) is m


class TestDcOffset:
    def test_absolute_value(self):
        assert normalize({"dcOffset": -0.02}).dc_offset == pytest.approx(0.02)

    def test_channel_fallback_uses_largest(self):
        m = normalize({"dc_offset_left": 0.01, "dcOffsetRight": -0.03})
        assert m.dc_offset == pytest.approx(0.03)

    def test_resolve_metric_direct(self):
        assert resolve_metric({"dc_offset": 0.0}, "dc_offset") == 0.0
        assert resolve_metric({}, "dc_offset") is NA


class TestEnvelopeAndExtras:
    def test_technical_data_envelope(self):
        m = normalize({"technicalData": {"truePeakDbtp": -1.2}, "track": "demo"})
        assert m.true_peak_dbtp == -1.2
        assert m.extras == {"track": "demo"}

    def test_unknown_keys_kept_in_extras(self):
        m = normalize({"lufs": -14.0, "bpm": 128.0})
        assert m.extras == {"bpm": 128.0}


class TestBands:
    def test_level_and_percent(self):
        m = normalize({"bandEnergies": {"sub": {"rms_db": -7.0, "energy_pct": 25.0}}})
        assert m.bands["sub"].level_db == -7.0
        assert m.bands["sub"].energy_fraction == pytest.approx(0.25)

    def test_bare_number_is_level(self):
        m = normalize({"bands": {"mid": -3.5}})
        assert m.bands["mid"].level_db == -3.5
        assert m.bands["mid"].energy_fraction is NA

    def test_fraction_from_raw_energy(self):
        m = normalize({"bands": {"low": {"energy": 1.0}, "high": {"energy": 3.0}}})
        assert m.bands["low"].energy_fraction == pytest.approx(0.25)
        assert m.bands["high"].energy_fraction == pytest.approx(0.75)
        assert m.bands["low"].level_db is NA

    def test_explicit_fraction_wins(self):
        m = normalize({"bands": {"low": {"energy": 1.0, "energy_fraction": 0.4}, "high": {"energy": 1.0}}})
        assert m.bands["low"].energy_fraction == pytest.approx(0.4)
        assert m.bands["high"].energy_fraction == pytest.approx(0.5)

    def test_band_lookup_by_metric_name(self):
        m = normalize({"bands": {"sub": {"level_db": -6.0}}})
        assert m.get("band_sub") == -6.0
        assert m.get("band_missing") is NA
        assert m.get("not_a_metric") is NA
