import pytest

from mixscore.exceptions import ConfigurationError
from mixscore.models import BandMeasurement, BandTarget, MetricTarget, ReferenceProfile, TechnicalMeasurement
from mixscore.validation import check_invariants, validate_profile, validate_weights


class TestValidateWeights:
    def test_valid(self):
        validate_weights({"loudness": 0.5, "tonal": 0.5})

    def test_not_summing_to_one_is_accepted(self):
        validate_weights({"loudness": 2.0, "tonal": 1.0})

    @pytest.mark.parametrize(
        "weights",
        [
            {},
            {"loudness": -0.1, "tonal": 1.0},
            {"loudness": float("nan")},
            {"loudness": 0.0, "tonal": 0.0},
            {"groove": 1.0},
        ],
    )
    def test_invalid(self, weights):
        with pytest.raises(ConfigurationError):
            validate_weights(weights)


class TestValidateProfile:
    def _profile(self, **metric):
        return ReferenceProfile(
            genre="g",
            metrics={"lra": MetricTarget(**metric)},
            category_weights={"dynamics": 1.0},
        )

    def test_valid(self):
        validate_profile(self._profile(target=6.0, tolerance=1.5))

    def test_bad_direction(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_profile(self._profile(target=6.0, tolerance=1.5, direction="lower"))
        assert exc_info.value.field == "lra.direction"

    def test_bad_side_tolerance(self):
        with pytest.raises(ConfigurationError):
            validate_profile(self._profile(target=6.0, tolerance=1.5, tolerance_high=0.0))

    def test_non_finite_target(self):
        with pytest.raises(ConfigurationError):
            validate_profile(self._profile(target=float("inf"), tolerance=1.5))

    def test_bad_band(self):
        profile = ReferenceProfile(
            genre="g", bands={"sub": BandTarget(-6.0, 0.0)}, category_weights={"tonal": 1.0}
        )
        with pytest.raises(ConfigurationError):
            validate_profile(profile)

    def test_unknown_metric_is_ignored(self):
        profile = ReferenceProfile(
            genre="g",
            metrics={"spectral_flux": MetricTarget(target=1.0, tolerance=0.0)},
            category_weights={"tonal": 1.0},
        )
        validate_profile(profile)

    def test_weights_checked_unless_overridden(self):
        profile = ReferenceProfile(genre="g", metrics={"lra": MetricTarget(target=6.0, tolerance=1.5)})
        with pytest.raises(ConfigurationError):
            validate_profile(profile)
        validate_profile(profile, check_weights=False)


class TestCheckInvariants:
    def test_plausible_measurement(self):
        m = TechnicalMeasurement(lufs_integrated=-14.0, true_peak_dbtp=-1.0, lra=6.0, dynamic_range=8.0)
        assert check_invariants(m) == []

    def test_empty_measurement(self):
        assert check_invariants(TechnicalMeasurement()) == []

    def test_loudness_out_of_range(self):
        assert len(check_invariants(TechnicalMeasurement(lufs_integrated=3.0))) == 1

    def test_true_peak_above_zero(self):
        warnings = check_invariants(TechnicalMeasurement(true_peak_dbtp=0.4))
        assert "above 0 dBTP" in warnings[0]

    def test_clipping_with_low_peak(self):
        m = TechnicalMeasurement(clipping_pct=2.0, true_peak_dbtp=-6.0)
        assert len(check_invariants(m)) == 1

    def test_clipping_out_of_range(self):
        assert len(check_invariants(TechnicalMeasurement(clipping_pct=120.0))) == 1

    def test_lra_far_above_dr(self):
        assert len(check_invariants(TechnicalMeasurement(lra=20.0, dynamic_range=5.0))) == 1

    def test_correlation_out_of_range(self):
        assert len(check_invariants(TechnicalMeasurement(stereo_correlation=1.5))) == 1

    def test_balance_out_of_range(self):
        assert len(check_invariants(TechnicalMeasurement(balance_lr=-1.2))) == 1
        assert check_invariants(TechnicalMeasurement(balance_lr=-0.4)) == []

    def test_band_fractions(self):
        bands = {"a": BandMeasurement(-6.0, 0.7), "b": BandMeasurement(-8.0, 0.6)}
        assert len(check_invariants(TechnicalMeasurement(bands=bands))) == 1
