"""Statistical helpers and A/B test insights"""

import pytest

from flowintent.analytics.ab_insights import (
    ABTestInsights,
    VariantCounts,
    calculate_ab_test_insights,
    confidence_from_p_value,
)
from flowintent.core.statistical_utils import (
    approximate_p_value,
    chi_square_statistic,
    cohens_h,
    exact_p_value,
    recommended_duration_days,
    required_sample_size,
    statistical_power,
    wilson_confidence_interval,
)


# ============================================================================
# statistical_utils
# ============================================================================

def test_wilson_confidence_interval():
    p, lower, upper = wilson_confidence_interval(50, 100)

    assert p == 0.5
    assert lower == pytest.approx(0.4038, abs=1e-3)
    assert upper == pytest.approx(0.5962, abs=1e-3)


def test_wilson_confidence_interval_no_trials():
    assert wilson_confidence_interval(0, 0) == (0.0, 0.0, 0.0)


def test_wilson_caps_proportion_when_clicks_exceed_impressions():
    p, lower, upper = wilson_confidence_interval(2, 1)

    assert p == 1.0
    assert 0.0 <= lower <= upper <= 1.0


def test_chi_square_statistic():
    assert chi_square_statistic([(1000, 20), (1000, 80)]) == pytest.approx(37.8947, abs=1e-3)
    assert chi_square_statistic([(1000, 50), (1000, 50)]) == pytest.approx(0.0)
    assert chi_square_statistic([(0, 0), (0, 0)]) == 0.0
    assert chi_square_statistic([]) == 0.0


def test_chi_square_skips_zero_expected_cells():
    # No clicks anywhere: the clicks column has zero expected count
    assert chi_square_statistic([(100, 0), (200, 0)]) == pytest.approx(0.0)


def test_approximate_p_value_is_clamped():
    assert approximate_p_value(0.0) == 1.0
    assert approximate_p_value(5.0) == pytest.approx(0.5)
    assert approximate_p_value(37.9) == 0.001


def test_exact_p_value():
    assert exact_p_value(3.841, 1) == pytest.approx(0.05, abs=1e-3)
    assert exact_p_value(10.0, 0) == 1.0


def test_cohens_h():
    assert cohens_h(0.5, 0.5) == 0.0
    assert cohens_h(0.08, 0.02) == cohens_h(0.02, 0.08)
    assert cohens_h(0.08, 0.02) == pytest.approx(0.2897, abs=1e-3)


def test_required_sample_size():
    n = required_sample_size(0.05)

    assert n == pytest.approx(8158, abs=5)
    assert required_sample_size(0.02) > n
    assert required_sample_size(0.999) == 0


def test_statistical_power():
    assert statistical_power(0.02, 1000, 0.08, 1000) > 0.99
    assert statistical_power(0.05, 1000, 0.05, 1000) < 0.05
    assert statistical_power(0.05, 0, 0.05, 1000) == 0.0
    assert statistical_power(0.0, 100, 0.0, 100) == 0.0


def test_statistical_power_clamps_proportions():
    power = statistical_power(1.5, 10, 0.0, 10)

    assert 0.0 <= power <= 1.0
    assert cohens_h(1.5, 1.0) == 0.0


@pytest.mark.parametrize("daily,expected", [
    (None, 14),
    (0, 14),
    (10, 30),
    (100, 20),
    (1000, 7),
])
def test_recommended_duration_days(daily, expected):
    assert recommended_duration_days(1000, 2, daily) == expected


# ============================================================================
# calculate_ab_test_insights
# ============================================================================

def test_identical_ratios_not_significant():
    insights = calculate_ab_test_insights({
        "A": VariantCounts(impressions=1000, clicks=50),
        "B": VariantCounts(impressions=1000, clicks=50),
    })

    assert not insights.is_significant
    assert insights.chi_square == pytest.approx(0.0)
    assert insights.confidence_level == pytest.approx(0.0)
    assert insights.effect_size == 0.0


def test_large_difference_is_significant():
    insights = calculate_ab_test_insights({
        "A": VariantCounts(impressions=1000, clicks=20),
        "B": VariantCounts(impressions=1000, clicks=80),
    })

    assert insights.is_significant
    assert insights.chi_square == pytest.approx(37.89, abs=0.01)
    assert insights.p_value == 0.001
    assert insights.confidence_level == pytest.approx(99.9)
    assert insights.best_variant == "B"
    assert insights.worst_variant == "A"
    assert insights.effect_size > 0.2
    assert insights.statistical_power > 0.99


def test_confidence_at_threshold_counts_as_significant():
    confidence = confidence_from_p_value(approximate_p_value(9.5))

    assert confidence == 95.0
    assert ABTestInsights(confidence_level=confidence).is_significant


def test_more_clicks_than_impressions():
    insights = calculate_ab_test_insights({
        "A": VariantCounts(impressions=1, clicks=2),
        "B": VariantCounts(impressions=1, clicks=0),
    })

    assert insights.best_variant == "A"
    assert insights.variants["A"].ctr == 1.0
    assert 0.0 <= insights.variants["A"].ci_lower <= insights.variants["A"].ci_upper <= 1.0
    assert 0.0 <= insights.statistical_power <= 1.0
    assert insights.effect_size == pytest.approx(3.1416, abs=1e-3)


def test_exact_method():
    insights = calculate_ab_test_insights(
        {"A": {"impressions": 1000, "clicks": 20}, "B": {"impressions": 1000, "clicks": 80}},
        method="exact"
    )

    assert insights.method == "exact"
    assert insights.p_value < 1e-6
    assert insights.confidence_level == pytest.approx(99.9)


def test_approximate_and_exact_disagree_on_small_samples():
    counts = {"A": {"impressions": 200, "clicks": 10}, "B": {"impressions": 200, "clicks": 20}}

    approximate = calculate_ab_test_insights(counts)
    exact = calculate_ab_test_insights(counts, method="exact")

    assert approximate.chi_square == pytest.approx(exact.chi_square)
    assert approximate.p_value != pytest.approx(exact.p_value)


@pytest.mark.parametrize("variant_results", [
    {},
    {"A": VariantCounts(impressions=1000, clicks=80)},
])
def test_fewer_than_two_variants_returns_defaults(variant_results):
    insights = calculate_ab_test_insights(variant_results)

    assert not insights.is_significant
    assert insights.confidence_level == 0.0
    assert insights.chi_square == 0.0
    assert insights.p_value == 1.0
    assert insights.effect_size == 0.0
    assert insights.statistical_power == 0.0
    assert insights.required_sample_size == 0
    assert insights.recommended_duration_days == 14
    assert insights.variants == {}


def test_variant_stats_and_sizing():
    insights = calculate_ab_test_insights(
        {
            "control": {"impressions": 1000, "clicks": 50},
            "variant_1": {"impressions": 1000, "clicks": 50},
        },
        days_running=10
    )

    control = insights.variants["control"]
    assert control.ctr == 0.05
    assert control.ci_lower < 0.05 < control.ci_upper
    assert insights.required_sample_size == required_sample_size(0.05)
    # 200 impressions/day against ~16k needed
    assert insights.recommended_duration_days == 30


def test_duration_without_days_running_uses_default():
    insights = calculate_ab_test_insights({
        "A": {"impressions": 1000, "clicks": 20},
        "B": {"impressions": 1000, "clicks": 80},
    })

    assert insights.recommended_duration_days == 14


def test_zero_impressions_are_not_significant():
    insights = calculate_ab_test_insights({
        "A": {"impressions": 0, "clicks": 0},
        "B": {"impressions": 0, "clicks": 0},
    })

    assert not insights.is_significant
    assert insights.statistical_power == 0.0


def test_to_dict_includes_significance():
    payload = calculate_ab_test_insights({
        "A": {"impressions": 1000, "clicks": 20},
        "B": {"impressions": 1000, "clicks": 80},
    }).to_dict()

    assert payload["is_significant"] is True
    assert payload["variants"]["B"]["clicks"] == 80


def test_unknown_method_rejected():
    with pytest.raises(ValueError):
        calculate_ab_test_insights({}, method="bayesian")
