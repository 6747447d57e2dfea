"""
Analytics Module
A/B test insights over aggregated variant counts
"""

from .ab_insights import (
    ABTestInsights,
    VariantCounts,
    VariantStats,
    calculate_ab_test_insights,
    confidence_from_p_value,
)

__all__ = [
    'ABTestInsights',
    'VariantCounts',
    'VariantStats',
    'calculate_ab_test_insights',
    'confidence_from_p_value',
]
