"""
Services - A/B test store and outbound rate limiting
"""

from .ab_testing import ABTest, ABTestService, ABTestStatus, ABTestVariant, get_ab_testing_service
from .rate_limiter import MinIntervalRateLimiter

__all__ = [
    'ABTest',
    'ABTestService',
    'ABTestStatus',
    'ABTestVariant',
    'get_ab_testing_service',
    'MinIntervalRateLimiter',
]
