"""
Central Statistical Utilities
Canonical implementations of the statistics used by A/B test insights

Functions:
- wilson_confidence_interval: Wilson score confidence interval for binomial proportions
- chi_square_statistic: Pearson chi-square of a 2xK clicks/non-clicks table
- approximate_p_value / exact_p_value: p-value from the chi-square statistic
- cohens_h: Effect size between two proportions
- required_sample_size: Per-variant sample size for a two-proportion test
- statistical_power: Approximate power of a two-proportion z-test
- recommended_duration_days: Test duration heuristic

References:
- Wilson, E.B. (1927). "Probable Inference, the Law of Succession, and Statistical Inference"
- Cohen, J. (1988). "Statistical Power Analysis for the Behavioral Sciences"
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import stats


def _clamp_proportion(p: float) -> float:
    return min(1.0, max(0.0, p))


def wilson_confidence_interval(
    successes: int,
    trials: int,
    alpha: float = 0.05
) -> Tuple[float, float, float]:
    """
    Calculate Wilson confidence interval for binomial proportion

    Args:
        successes: Number of successes (clicks)
        trials: Total number of trials (impressions)
        alpha: Significance level (default 0.05 for 95% CI)

    Returns:
        Tuple of (proportion, ci_lower, ci_upper)

    Mathematical Formula:
        Center = (p + z²/(2n)) / (1 + z²/n)
        Margin = z * sqrt((p(1-p) + z²/(4n)) / n) / (1 + z²/n)
        where p = successes/trials, z = z-score for alpha

    Examples:
        >>> wilson_confidence_interval(50, 100, alpha=0.05)
        (0.5, 0.4038, 0.5962)

        >>> wilson_confidence_interval(0, 10, alpha=0.05)
        (0.0, 0.0, 0.2775)
    """
    if trials == 0:
        return 0.0, 0.0, 0.0

    z = stats.norm.ppf(1 - alpha/2)

    # clicks may exceed impressions; the proportion is capped at 1
    p = _clamp_proportion(successes / trials)

    denominator = 1 + z**2 / trials
    center = (p + z**2 / (2 * trials)) / denominator
    margin = z * np.sqrt((p * (1 - p) + z**2 / (4 * trials)) / trials) / denominator

    ci_lower = max(0.0, float(center - margin))
    ci_upper = min(1.0, float(center + margin))

    return p, ci_lower, ci_upper


def chi_square_statistic(counts: Sequence[Tuple[int, int]]) -> float:
    """
    Pearson chi-square statistic for a 2xK contingency table

    Args:
        counts: One (impressions, clicks) pair per variant

    Returns:
        Chi-square statistic; cells with zero expected count are skipped,
        so an all-zero table yields 0.0
    """
    if not counts:
        return 0.0

    observed = np.array(
        [[clicks, max(impressions - clicks, 0)] for impressions, clicks in counts],
        dtype=float
    )

    total = observed.sum()
    if total == 0:
        return 0.0

    row_totals = observed.sum(axis=1, keepdims=True)
    col_totals = observed.sum(axis=0, keepdims=True)
    expected = row_totals * col_totals / total

    mask = expected > 0
    chi2 = ((observed[mask] - expected[mask]) ** 2 / expected[mask]).sum()

    return float(chi2)


def approximate_p_value(chi2: float) -> float:
    """
    Simplified linear p-value: clamp(1 - chi2/10, 0.001, 1)

    This is a dashboard heuristic, NOT a rigorous statistic: it ignores the
    degrees of freedom and saturates at chi2 >= 9.99. Use exact_p_value for
    an actual chi-square test.
    """
    return min(1.0, max(0.001, 1.0 - chi2 / 10.0))


def exact_p_value(chi2: float, degrees_of_freedom: int) -> float:
    """Chi-square survival function p-value"""
    if degrees_of_freedom < 1:
        return 1.0
    return float(stats.chi2.sf(chi2, degrees_of_freedom))


def cohens_h(p1: float, p2: float) -> float:
    """
    Cohen's h effect size between two proportions (absolute value)

    Rules of thumb: 0.2 small, 0.5 medium, 0.8 large
    """
    p1 = _clamp_proportion(p1)
    p2 = _clamp_proportion(p2)
    return abs(2 * math.asin(math.sqrt(p1)) - 2 * math.asin(math.sqrt(p2)))


def required_sample_size(
    baseline_rate: float,
    relative_lift: float = 0.2,
    alpha: float = 0.05,
    power: float = 0.8
) -> int:
    """
    Per-variant sample size for a two-sided two-proportion z-test

    Args:
        baseline_rate: Baseline conversion rate (clamped to [0.001, 0.999])
        relative_lift: Minimum detectable relative lift (0.2 = +20%)
        alpha: Significance level
        power: Desired power

    Returns:
        Impressions needed per variant (0 when no lift is detectable)
    """
    p1 = min(0.999, max(0.001, baseline_rate))
    p2 = min(0.999, p1 * (1 + relative_lift))
    if p2 <= p1:
        return 0

    z_alpha = stats.norm.ppf(1 - alpha / 2)
    z_beta = stats.norm.ppf(power)
    p_bar = (p1 + p2) / 2

    numerator = (
        z_alpha * math.sqrt(2 * p_bar * (1 - p_bar))
        + z_beta * math.sqrt(p1 * (1 - p1) + p2 * (1 - p2))
    ) ** 2

    return int(math.ceil(numerator / (p2 - p1) ** 2))


def statistical_power(
    p1: float,
    n1: int,
    p2: float,
    n2: int,
    alpha: float = 0.05
) -> float:
    """
    Approximate observed power of a two-sided two-proportion z-test

    Returns:
        Power in [0, 1]; 0.0 when either sample is empty. Proportions are
        clamped to [0, 1].
    """
    if n1 <= 0 or n2 <= 0:
        return 0.0

    p1 = _clamp_proportion(p1)
    p2 = _clamp_proportion(p2)

    diff = abs(p1 - p2)
    se = math.sqrt(p1 * (1 - p1) / n1 + p2 * (1 - p2) / n2)
    if se == 0:
        return 1.0 if diff > 0 else 0.0

    z_alpha = stats.norm.ppf(1 - alpha / 2)
    return float(stats.norm.cdf(diff / se - z_alpha))


def recommended_duration_days(
    required_per_variant: int,
    variant_count: int,
    daily_impressions: Optional[float],
    min_days: int = 7,
    max_days: int = 30,
    default_days: int = 14
) -> int:
    """
    Days needed to collect the required sample at the observed traffic

    Returns:
        Days clamped to [min_days, max_days]; default_days when daily
        traffic is unknown
    """
    if not daily_impressions or daily_impressions <= 0:
        return default_days

    days = math.ceil(required_per_variant * variant_count / daily_impressions)
    return int(min(max_days, max(min_days, days)))
