"""Rank metric suggestions by how much fixing them would move the score."""

from collections import defaultdict
from typing import Dict, List, Sequence

from .models import CategoryScore, Recommendation, ToleranceResult, is_available

HIGH_IMPACT = 10.0
MEDIUM_IMPACT = 5.0

EXCELLENT_SCORE = 95.0
ATTENTION_SCORE = 60.0


def _priority(impact: float) -> str:
    if impact >= HIGH_IMPACT:
        return "high"
    if impact >= MEDIUM_IMPACT:
        return "medium"
    return "low"


def metric_weights(
    per_metric: Sequence[ToleranceResult], per_category: Sequence[CategoryScore]
) -> Dict[str, float]:
    """Share of the final score carried by each available metric."""
    member_totals = defaultdict(float)
    for m in per_metric:
        if is_available(m.score):
            member_totals[m.category] += m.weight
    category_weight = {c.name: c.weight for c in per_category}

    shares = {}
    for m in per_metric:
        total = member_totals.get(m.category, 0.0)
        if is_available(m.score) and total > 0:
            shares[m.metric] = category_weight.get(m.category, 0.0) * m.weight / total
    return shares


def top_recommendations(
    per_metric: Sequence[ToleranceResult],
    per_category: Sequence[CategoryScore],
    limit: int = 3,
) -> List[Recommendation]:
    """Suggestions ordered by impact = (100 - score) * share of the final score."""
    shares = metric_weights(per_metric, per_category)
    ranked = []
    for m in per_metric:
        if m.suggestion is None or m.metric not in shares:
            continue
        impact = (100.0 - m.score) * shares[m.metric]
        ranked.append(
            Recommendation(
                metric=m.metric,
                category=m.category,
                suggestion=m.suggestion,
                impact=round(impact, 2),
                priority=_priority(impact),
            )
        )
    ranked.sort(key=lambda r: (-r.impact, r.metric))
    return ranked[:limit]


def highlights(per_metric: Sequence[ToleranceResult], limit: int = 5) -> Dict[str, List[str]]:
    """Best and worst scoring metrics."""
    scored = [m for m in per_metric if is_available(m.score)]
    excellent = sorted(
        (m for m in scored if m.score >= EXCELLENT_SCORE), key=lambda m: (-m.score, m.metric)
    )
    attention = sorted(
        (m for m in scored if m.score <= ATTENTION_SCORE), key=lambda m: (m.score, m.metric)
    )
    return {
        "excellent": [m.metric for m in excellent[:limit]],
        "needs_attention": [m.metric for m in attention[:limit]],
    }
