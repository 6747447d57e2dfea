"""
FlowIntent - chat routing, tool selection and A/B test insights for an SEO/AEO assistant
"""

__version__ = "1.0.0"
