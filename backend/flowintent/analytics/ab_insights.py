"""
A/B Test Insights
Significance, effect size and sizing heuristics over aggregated
impressions/clicks per variant
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Mapping, Optional, Union

from ..agents.shared.structured_logger import get_logger
from ..core.statistical_utils import (
    approximate_p_value,
    chi_square_statistic,
    cohens_h,
    exact_p_value,
    recommended_duration_days,
    required_sample_size,
    statistical_power,
    wilson_confidence_interval,
)

logger = get_logger("ABInsights")

SIGNIFICANCE_THRESHOLD = 95.0
MAX_CONFIDENCE = 99.9
DEFAULT_DURATION_DAYS = 14
MIN_DURATION_DAYS = 7
MAX_DURATION_DAYS = 30
MINIMUM_DETECTABLE_LIFT = 0.2

METHODS = ("approximate", "exact")


@dataclass
class VariantCounts:
    """Aggregated counts for one variant"""
    impressions: int = 0
    clicks: int = 0

    @property
    def ctr(self) -> float:
        if self.impressions <= 0:
            return 0.0
        return min(1.0, self.clicks / self.impressions)


@dataclass
class VariantStats:
    """Per-variant CTR with Wilson 95% interval"""
    impressions: int
    clicks: int
    ctr: float
    ci_lower: float
    ci_upper: float


@dataclass
class ABTestInsights:
    """Insights for one A/B test"""
    confidence_level: float = 0.0
    chi_square: float = 0.0
    p_value: float = 1.0
    effect_size: float = 0.0
    statistical_power: float = 0.0
    required_sample_size: int = 0
    recommended_duration_days: int = DEFAULT_DURATION_DAYS
    method: str = "approximate"
    best_variant: Optional[str] = None
    worst_variant: Optional[str] = None
    variants: Dict[str, VariantStats] = field(default_factory=dict)

    @property
    def is_significant(self) -> bool:
        return self.confidence_level >= SIGNIFICANCE_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["is_significant"] = self.is_significant
        return payload


CountsLike = Union[VariantCounts, Mapping[str, Any]]


def _coerce_counts(value: CountsLike) -> VariantCounts:
    if isinstance(value, VariantCounts):
        return value
    return VariantCounts(
        impressions=int(value.get("impressions", 0) or 0),
        clicks=int(value.get("clicks", 0) or 0)
    )


def confidence_from_p_value(p_value: float) -> float:
    """Confidence percentage, capped at 99.9 and rounded so 95.0 stays 95.0"""
    return round(min(MAX_CONFIDENCE, (1 - p_value) * 100), 6)


def calculate_ab_test_insights(
    variant_results: Mapping[str, CountsLike],
    days_running: Optional[float] = None,
    method: str = "approximate"
) -> ABTestInsights:
    """
    Calculate A/B test insights

    Args:
        variant_results: Variant id -> VariantCounts (or dict with
            ``impressions``/``clicks``)
        days_running: Days the test has been active; enables the
            traffic-based duration estimate
        method: "approximate" (linear chi-square heuristic, the dashboard
            default) or "exact" (chi-square survival function, K-1 df)

    Returns:
        ABTestInsights. With fewer than two variants nothing is computed and
        the defaults are returned (not significant, confidence 0).
    """
    if method not in METHODS:
        raise ValueError(f"Unknown insights method: {method}")

    counts = {variant_id: _coerce_counts(value) for variant_id, value in variant_results.items()}

    if len(counts) < 2:
        return ABTestInsights(method=method)

    variants: Dict[str, VariantStats] = {}
    for variant_id, c in counts.items():
        ctr, ci_lower, ci_upper = wilson_confidence_interval(c.clicks, c.impressions)
        variants[variant_id] = VariantStats(
            impressions=c.impressions,
            clicks=c.clicks,
            ctr=ctr,
            ci_lower=ci_lower,
            ci_upper=ci_upper
        )

    # Significance
    chi2 = chi_square_statistic([(c.impressions, c.clicks) for c in counts.values()])
    if method == "exact":
        p_value = exact_p_value(chi2, len(counts) - 1)
    else:
        p_value = approximate_p_value(chi2)
    confidence_level = confidence_from_p_value(p_value)

    # Effect size, best vs worst CTR
    best_id = max(counts, key=lambda k: counts[k].ctr)
    worst_id = min(counts, key=lambda k: counts[k].ctr)
    best, worst = counts[best_id], counts[worst_id]
    effect_size = cohens_h(best.ctr, worst.ctr)

    power = statistical_power(best.ctr, best.impressions, worst.ctr, worst.impressions)

    # Sizing
    total_impressions = sum(c.impressions for c in counts.values())
    total_clicks = sum(c.clicks for c in counts.values())
    pooled_ctr = total_clicks / total_impressions if total_impressions > 0 else 0.0
    sample_size = required_sample_size(pooled_ctr, relative_lift=MINIMUM_DETECTABLE_LIFT)

    daily_impressions = None
    if days_running and days_running > 0:
        daily_impressions = total_impressions / max(1.0, math.ceil(days_running))

    duration = recommended_duration_days(
        sample_size,
        len(counts),
        daily_impressions,
        min_days=MIN_DURATION_DAYS,
        max_days=MAX_DURATION_DAYS,
        default_days=DEFAULT_DURATION_DAYS
    )

    insights = ABTestInsights(
        confidence_level=confidence_level,
        chi_square=chi2,
        p_value=p_value,
        effect_size=effect_size,
        statistical_power=power,
        required_sample_size=sample_size,
        recommended_duration_days=duration,
        method=method,
        best_variant=best_id,
        worst_variant=worst_id,
        variants=variants
    )

    logger.debug(
        "Calculated A/B insights",
        variants=len(counts),
        chi_square=round(chi2, 4),
        confidence_level=round(confidence_level, 2),
        significant=insights.is_significant
    )

    return insights
