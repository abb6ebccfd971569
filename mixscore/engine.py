"""Mix scoring engine: technical data + genre reference -> ScoreResult."""

from dataclasses import replace
from typing import List

from .config import CATEGORIES, DEFAULT_CONFIG, METRIC_CATEGORIES, TONAL, ScoringConfig
from .exceptions import ConfigurationError, InsufficientDataError, PartialDataWarning
from .gates import apply_gates, validate_gate
from .logging_config import get_logger
from .models import (
    NA,
    CategoryScore,
    ReferenceProfile,
    ScoreResult,
    TechnicalMeasurement,
    ToleranceResult,
    is_available,
)
from .normalizer import normalize
from .recommendations import highlights, top_recommendations
from .scoring import (
    aggregate_category,
    classify,
    combine_categories,
    effective_weights,
    evaluate_tolerance,
    score_from_deviation,
    validate_curve,
)
from .validation import check_invariants, validate_profile, validate_weights

logger = get_logger(__name__)


class MixScorer:
    """Scores a track's technical data against a genre reference profile.

    Stateless apart from its immutable config, so one instance can serve
    concurrent calls.
    """

    def __init__(self, config: ScoringConfig = None):
        """Initialize scorer with configuration.

        Args:
            config: Scoring configuration. Uses DEFAULT_CONFIG if not provided.

        Raises:
            ConfigurationError: If the curve, gates or weight override are invalid.
        """
        self.config = config or DEFAULT_CONFIG
        validate_curve(self.config.curve, self.config.curve_floor)
        for gate in self.config.gates:
            validate_gate(gate)
        if self.config.category_weights is not None:
            validate_weights(self.config.category_weights)

    def _scored(self, result: ToleranceResult, category: str, weight: float) -> ToleranceResult:
        score = NA
        if result.available:
            score = score_from_deviation(result.n, self.config.curve, self.config.curve_floor)
        logger.debug(
            "Metric %s: value=%r target=%r status=%s score=%r",
            result.metric,
            result.value,
            result.target,
            result.status,
            score,
        )
        return replace(result, category=category, weight=weight, score=score)

    def evaluate_metrics(
        self, measurement: TechnicalMeasurement, profile: ReferenceProfile
    ) -> List[ToleranceResult]:
        """Tolerance status and curve score for every metric and band in the profile."""
        results = []
        for name, category in METRIC_CATEGORIES.items():
            mt = profile.metrics.get(name)
            if mt is None:
                continue
            value = measurement.get(name)
            tolerance = mt.side_tolerance(value - mt.target) if is_available(value) else mt.tolerance
            result = evaluate_tolerance(value, mt.target, tolerance, mt.unit, name, mt.direction)
            results.append(self._scored(result, category, mt.weight))

        for band, bt in profile.bands.items():
            measured = measurement.bands.get(band)
            value = measured.level_db if measured is not None else NA
            result = evaluate_tolerance(value, bt.target_db, bt.tol_db, "dB", f"band_{band}")
            results.append(self._scored(result, TONAL, bt.weight))

        misconfigured = [r for r in results if r.error]
        if misconfigured:
            first = misconfigured[0]
            raise ConfigurationError(f"{first.metric}: {first.error}", field=first.metric)
        return results

    def aggregate(self, per_metric: List[ToleranceResult], weights) -> List[CategoryScore]:
        """One CategoryScore per category that has members or carries weight."""
        categories = []
        for name in CATEGORIES:
            members = [m for m in per_metric if m.category == name]
            if not members and weights.get(name, 0.0) <= 0:
                continue
            categories.append(aggregate_category(name, members))
        return categories

    def score(self, technical_data, profile: ReferenceProfile) -> ScoreResult:
        """Score technical data against a reference profile.

        Args:
            technical_data: Raw technical-data mapping or a TechnicalMeasurement.
            profile: Genre reference profile.

        Returns:
            ScoreResult with per-metric and per-category breakdown.

        Raises:
            ConfigurationError: If the profile is malformed.
            InsufficientDataError: If no category has usable data.
        """
        measurement = normalize(technical_data)
        validate_profile(profile, check_weights=self.config.category_weights is None)
        weights = self.config.category_weights
        if weights is None:
            weights = profile.category_weights

        per_metric = self.evaluate_metrics(measurement, profile)
        categories = self.aggregate(per_metric, weights)
        excluded_metrics = [m.metric for m in per_metric if not m.available]

        if not any(c.available for c in categories):
            logger.warning("No usable data for genre %s", profile.genre)
            raise InsufficientDataError(
                f"Insufficient data to score against {profile.genre}",
                excluded_metrics=excluded_metrics,
            )

        eff = effective_weights(categories, weights)
        categories = [replace(c, weight=eff.get(c.name, 0.0)) for c in categories]
        raw_score = combine_categories(categories, weights)

        applied = []
        final_score = raw_score
        if self.config.apply_gates:
            final_score, applied = apply_gates(raw_score, measurement, self.config.gates)
        score_pct = round(min(100.0, max(0.0, final_score)), 1)

        excluded_categories = [c.name for c in categories if not c.available]
        warnings = []
        if excluded_metrics or excluded_categories:
            partial = PartialDataWarning(excluded_metrics, excluded_categories)
            logger.warning("%s", partial)
            warnings.append(str(partial))
        if self.config.check_invariants:
            warnings.extend(check_invariants(measurement))

        result = ScoreResult(
            score_pct=score_pct,
            raw_score=round(raw_score, 2),
            classification=classify(score_pct, self.config.classification_tiers),
            per_category=categories,
            per_metric=per_metric,
            applied_gates=applied,
            excluded_metrics=excluded_metrics,
            excluded_categories=excluded_categories,
            warnings=warnings,
            recommendations=top_recommendations(
                per_metric, categories, self.config.recommendation_limit
            ),
            highlights=highlights(per_metric),
            genre=profile.genre,
            curve=self.config.curve,
        )
        logger.debug(
            "Mix score for %s: %.1f (%s), raw %.2f, %d gates",
            profile.genre,
            result.score_pct,
            result.classification,
            raw_score,
            len(applied),
        )
        return result


def score_mix(technical_data, profile: ReferenceProfile, config: ScoringConfig = None) -> ScoreResult:
    """Score with a one-off MixScorer."""
    return MixScorer(config).score(technical_data, profile)
