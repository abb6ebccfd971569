import pytest

from mixscore.models import NA, STATUS_FIX, STATUS_IDEAL, STATUS_UNAVAILABLE, CategoryScore, ToleranceResult
from mixscore.recommendations import highlights, metric_weights, top_recommendations
from mixscore.scoring import evaluate_tolerance


def _scored(metric, category, value, target, tolerance, score, weight=1.0):
    result = evaluate_tolerance(value, target, tolerance, metric=metric)
    return ToleranceResult(
        metric=metric,
        status=result.status,
        value=result.value,
        target=result.target,
        tolerance=result.tolerance,
        deviation=result.deviation,
        n=result.n,
        category=category,
        weight=weight,
        score=score,
        suggestion=result.suggestion,
    )


@pytest.fixture
def per_metric():
    return [
        _scored("lufs_integrated", "loudness", -17.0, -14.0, 1.0, 1.1),
        _scored("dynamic_range", "dynamics", 12.5, 8.0, 2.0, 8.0),
        _scored("lra", "dynamics", 6.0, 6.0, 1.0, 100.0),
        _scored("stereo_width", "stereo", 0.2, 0.6, 0.25, 28.0),
        ToleranceResult(metric="crest_factor", status=STATUS_UNAVAILABLE, category="dynamics"),
    ]


@pytest.fixture
def per_category():
    return [
        CategoryScore("loudness", 1.1, 1, 0, weight=0.5),
        CategoryScore("dynamics", 54.0, 2, 1, weight=0.4),
        CategoryScore("stereo", 28.0, 1, 0, weight=0.1),
    ]


class TestMetricWeights:
    def test_shares(self, per_metric, per_category):
        shares = metric_weights(per_metric, per_category)
        assert shares["lufs_integrated"] == pytest.approx(0.5)
        assert shares["dynamic_range"] == pytest.approx(0.2)
        assert shares["lra"] == pytest.approx(0.2)
        assert "crest_factor" not in shares
        assert sum(shares.values()) == pytest.approx(1.0)


class TestTopRecommendations:
    def test_ranked_by_impact(self, per_metric, per_category):
        recs = top_recommendations(per_metric, per_category)
        assert [r.metric for r in recs] == ["lufs_integrated", "dynamic_range", "stereo_width"]
        assert recs[0].impact == pytest.approx(49.45)
        assert recs[0].priority == "high"
        assert recs[2].priority == "medium"

    def test_limit(self, per_metric, per_category):
        assert len(top_recommendations(per_metric, per_category, limit=1)) == 1

    def test_ideal_metrics_never_recommended(self, per_metric, per_category):
        metrics = {r.metric for r in top_recommendations(per_metric, per_category, limit=10)}
        assert "lra" not in metrics
        assert "crest_factor" not in metrics

    def test_low_priority(self):
        per_metric = [_scored("stereo_width", "stereo", 0.2, 0.6, 0.25, 40.0)]
        per_category = [CategoryScore("stereo", 40.0, 1, 0, weight=0.05)]
        assert top_recommendations(per_metric, per_category)[0].priority == "low"


class TestHighlights:
    def test_excellent_and_attention(self, per_metric):
        result = highlights(per_metric)
        assert result["excellent"] == ["lra"]
        assert result["needs_attention"] == ["lufs_integrated", "dynamic_range", "stereo_width"]

    def test_unavailable_ignored(self):
        per_metric = [ToleranceResult(metric="lra", status=STATUS_UNAVAILABLE, score=NA)]
        assert highlights(per_metric) == {"excellent": [], "needs_attention": []}

    def test_limit(self):
        per_metric = [
            ToleranceResult(metric=f"m{i}", status=STATUS_FIX, score=float(i)) for i in range(10)
        ] + [ToleranceResult(metric="ok", status=STATUS_IDEAL, score=100.0)]
        result = highlights(per_metric, limit=2)
        assert result["needs_attention"] == ["m0", "m1"]
        assert result["excellent"] == ["ok"]
