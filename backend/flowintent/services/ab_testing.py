"""
A/B Testing Service

Headline / meta-description A/B tests: LLM-generated variations, lifecycle
(draft -> active <-> paused -> completed), impression/click tracking, sticky
variant assignment and insights.

Storage is in-memory and process-local.
"""

import hashlib
import json
import random
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..agents.shared.bedrock_adapter import BedrockLLM, extract_json_text
from ..agents.shared.config import get_config
from ..agents.shared.errors import (
    ABTestNotFoundError,
    ABTestStateError,
    ABVariantNotFoundError,
    InvalidTransitionError,
)
from ..agents.shared.structured_logger import get_logger
from ..analytics.ab_insights import ABTestInsights, VariantCounts, calculate_ab_test_insights


VariantType = Literal["headline", "meta_description", "title", "description"]

CHARACTER_LIMITS = {
    "headline": 60,
    "title": 60,
    "meta_description": 160,
    "description": 160,
}

CONTROL_VARIANT_ID = "control"


class ABTestStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


# target status -> statuses it may be reached from
ALLOWED_TRANSITIONS = {
    ABTestStatus.ACTIVE: {ABTestStatus.DRAFT, ABTestStatus.PAUSED},
    ABTestStatus.PAUSED: {ABTestStatus.ACTIVE},
    ABTestStatus.COMPLETED: {ABTestStatus.ACTIVE, ABTestStatus.PAUSED},
}


class ABTestVariant(BaseModel):
    id: str
    name: str
    type: VariantType
    content: str
    weight: int = Field(ge=0, le=100, description="Traffic percentage (0-100)")


class VariantResult(BaseModel):
    impressions: int = 0
    clicks: int = 0

    @property
    def ctr(self) -> float:
        if self.impressions <= 0:
            return 0.0
        return min(1.0, self.clicks / self.impressions)


class ABTestResults(BaseModel):
    total_impressions: int = 0
    total_clicks: int = 0
    variant_results: Dict[str, VariantResult] = Field(default_factory=dict)


class ABTest(BaseModel):
    id: str
    user_id: str
    name: str
    description: str = ""
    content_id: Optional[str] = None
    variants: List[ABTestVariant]
    status: ABTestStatus = ABTestStatus.DRAFT
    traffic_split: Dict[str, int] = Field(default_factory=dict, description="variant name -> percentage")
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    results: ABTestResults = Field(default_factory=ABTestResults)
    winner: Optional[str] = None
    confidence_score: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    def get_variant(self, variant_id: str) -> Optional[ABTestVariant]:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None


def equal_weights(count: int) -> List[int]:
    """Integer weights summing to 100; the remainder goes to the first variants"""
    if count <= 0:
        return []
    base, remainder = divmod(100, count)
    return [base + 1 if i < remainder else base for i in range(count)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_VARIATIONS_ADAPTER = TypeAdapter(List[str])


class ABTestService:
    """
    In-memory A/B test store

    Example:
        >>> service = ABTestService(llm=my_llm)
        >>> test = service.create_test("user-1", "Homepage headline", original_content="Rank higher")
        >>> service.start_test(test.id, "user-1")
        >>> variant = service.get_variant_for_user(test.id, user_id="visitor-9")
    """

    def __init__(
        self,
        llm: Optional[Any] = None,
        model: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        self._llm = llm
        self.model = model or get_config().variation_model
        self._clock = clock
        self._tests: Dict[str, ABTest] = {}
        self._assignments: Dict[str, Dict[str, str]] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("ABTestService")

    @property
    def llm(self):
        if self._llm is None:
            self._llm = BedrockLLM(model=self.model)
        return self._llm

    # ------------------------------------------------------------------
    # Variations
    # ------------------------------------------------------------------

    def generate_variations(self, original_content: str, variant_type: str, count: int = 3) -> List[str]:
        """
        LLM-generated variations of a headline or meta description

        Returns:
            Up to ``count`` variations; an empty list when generation fails
        """
        limit = CHARACTER_LIMITS.get(variant_type, 160)
        label = variant_type.replace("_", " ")

        prompt = f"""Generate {count} compelling variations for A/B testing.

Original {label}: "{original_content}"

Requirements for variations:
1. Maintain the core message and target keywords
2. Use different psychological triggers (curiosity, urgency, benefit-driven, question-based)
3. Vary the length and structure
4. Optimize for click-through rate
5. Keep within character limits ({limit} characters)

Return only the variations as a JSON array of strings, no explanations."""

        try:
            result = self.llm.generate_sync(prompt=prompt, max_tokens=800, temperature=0.8)
            variations = _VARIATIONS_ADAPTER.validate_python(json.loads(extract_json_text(result["text"])))
        except (json.JSONDecodeError, ValidationError, KeyError, TypeError) as e:
            self.logger.error("Variation output could not be parsed", error=str(e), error_type=type(e).__name__)
            return []
        except Exception as e:
            # Provider failures degrade to "no variations"
            self.logger.error("Failed to generate A/B test variations", error=str(e), error_type=type(e).__name__)
            return []

        cleaned = [v.strip() for v in variations if v and v.strip() and v.strip() != original_content.strip()]
        return cleaned[:count]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_test(
        self,
        user_id: str,
        name: str,
        original_content: str,
        variant_type: VariantType = "headline",
        description: str = "",
        content_id: Optional[str] = None,
        variations: Optional[List[str]] = None,
        variation_count: int = 3
    ) -> ABTest:
        """
        Create a draft test

        The control variant holds the original content; the other variants
        come from ``variations`` or, when none are given, from the LLM.
        """
        if variations is None:
            variations = self.generate_variations(original_content, variant_type, variation_count)

        contents = [original_content] + list(variations)
        weights = equal_weights(len(contents))

        variants = [
            ABTestVariant(
                id=CONTROL_VARIANT_ID if i == 0 else f"variant_{i}",
                name="Control" if i == 0 else f"Variation {i}",
                type=variant_type,
                content=content,
                weight=weight
            )
            for i, (content, weight) in enumerate(zip(contents, weights))
        ]

        now = self._clock()
        test = ABTest(
            id=uuid.uuid4().hex,
            user_id=user_id,
            name=name,
            description=description,
            content_id=content_id,
            variants=variants,
            traffic_split={v.name: v.weight for v in variants},
            results=ABTestResults(variant_results={v.id: VariantResult() for v in variants}),
            created_at=now,
            updated_at=now
        )

        with self._lock:
            self._tests[test.id] = test

        self.logger.info("A/B test created", test_id=test.id, user_id=user_id, variants=len(variants))
        return test.model_copy(deep=True)

    def get_test(self, test_id: str, user_id: Optional[str] = None) -> ABTest:
        with self._lock:
            return self._get(test_id, user_id).model_copy(deep=True)

    def get_user_tests(self, user_id: str, status: Optional[str] = None, limit: int = 20) -> List[ABTest]:
        """User's tests, newest first"""
        status_filter = ABTestStatus(status) if status else None
        with self._lock:
            tests = [
                t for t in self._tests.values()
                if t.user_id == user_id and (status_filter is None or t.status == status_filter)
            ]
            tests.sort(key=lambda t: t.created_at, reverse=True)
            return [t.model_copy(deep=True) for t in tests[:max(0, limit)]]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_test(self, test_id: str, user_id: str) -> ABTest:
        return self._transition(test_id, user_id, ABTestStatus.ACTIVE)

    def pause_test(self, test_id: str, user_id: str) -> ABTest:
        return self._transition(test_id, user_id, ABTestStatus.PAUSED)

    def complete_test(self, test_id: str, user_id: str) -> ABTest:
        """Complete a test; the best-CTR variant wins when the result is significant"""
        return self._transition(test_id, user_id, ABTestStatus.COMPLETED)

    def _transition(self, test_id: str, user_id: str, target: ABTestStatus) -> ABTest:
        with self._lock:
            test = self._get(test_id, user_id)

            if test.status not in ALLOWED_TRANSITIONS[target]:
                raise InvalidTransitionError(test.status.value, target.value)

            now = self._clock()

            # Computed before any field changes so a failure leaves the test untouched
            insights = self._insights(test, end=now) if target == ABTestStatus.COMPLETED else None

            previous = test.status
            test.status = target
            test.updated_at = now

            if target == ABTestStatus.ACTIVE and test.start_date is None:
                test.start_date = now

            if insights is not None:
                test.end_date = now
                test.confidence_score = insights.confidence_level
                test.winner = insights.best_variant if insights.is_significant else None

            self.logger.info(
                "A/B test status changed",
                test_id=test_id,
                previous=previous.value,
                status=target.value,
                winner=test.winner
            )
            return test.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def record_impression(self, test_id: str, variant_id: str) -> None:
        with self._lock:
            result = self._tracked_result(test_id, variant_id)
            result.impressions += 1
            test = self._tests[test_id]
            test.results.total_impressions += 1

    def record_click(self, test_id: str, variant_id: str) -> None:
        with self._lock:
            result = self._tracked_result(test_id, variant_id)
            result.clicks += 1
            test = self._tests[test_id]
            test.results.total_clicks += 1

    def _tracked_result(self, test_id: str, variant_id: str) -> VariantResult:
        test = self._get(test_id)
        if test.status != ABTestStatus.ACTIVE:
            raise ABTestStateError(
                f"A/B test {test_id} is not active",
                details={"test_id": test_id, "status": test.status.value}
            )
        if test.get_variant(variant_id) is None:
            raise ABVariantNotFoundError(test_id, variant_id)
        return test.results.variant_results.setdefault(variant_id, VariantResult())

    def get_variant_for_user(
        self,
        test_id: str,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None
    ) -> Optional[ABTestVariant]:
        """
        Variant shown to a user or session

        Assignment is sticky per subject (user id, else session id). The first
        assignment is a weighted pick driven by sha256 of "test_id:subject", so
        it is reproducible across processes. Without a subject a weighted
        random variant is returned and nothing is stored.

        Returns:
            The variant, or None when the test is not active
        """
        with self._lock:
            test = self._get(test_id)
            if test.status != ABTestStatus.ACTIVE or not test.variants:
                return None

            subject = user_id or session_id
            if subject is None:
                weights = [max(v.weight, 0) for v in test.variants]
                variant = random.choices(test.variants, weights=weights if sum(weights) > 0 else None)[0]
                return variant.model_copy()

            assignments = self._assignments.setdefault(test_id, {})
            assigned_id = assignments.get(subject)
            variant = test.get_variant(assigned_id) if assigned_id else None

            if variant is None:
                variant = self._weighted_pick(test, subject)
                assignments[subject] = variant.id
                self.logger.debug("Variant assigned", test_id=test_id, subject=subject, variant_id=variant.id)

            return variant.model_copy()

    @staticmethod
    def _weighted_pick(test: ABTest, subject: str) -> ABTestVariant:
        total = sum(max(v.weight, 0) for v in test.variants)
        digest = hashlib.sha256(f"{test.id}:{subject}".encode("utf-8")).hexdigest()
        bucket_seed = int(digest[:15], 16)

        if total <= 0:
            return test.variants[bucket_seed % len(test.variants)]

        bucket = bucket_seed % total
        cumulative = 0
        for variant in test.variants:
            cumulative += max(variant.weight, 0)
            if bucket < cumulative:
                return variant
        return test.variants[-1]

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    def calculate_insights(self, test_id: str, user_id: Optional[str] = None, method: str = "approximate") -> ABTestInsights:
        with self._lock:
            return self._insights(self._get(test_id, user_id), method=method)

    def _insights(
        self,
        test: ABTest,
        method: str = "approximate",
        end: Optional[datetime] = None
    ) -> ABTestInsights:
        counts = {
            variant_id: VariantCounts(impressions=r.impressions, clicks=r.clicks)
            for variant_id, r in test.results.variant_results.items()
        }

        days_running = None
        if test.start_date is not None:
            end = end or test.end_date or self._clock()
            days_running = (end - test.start_date).total_seconds() / 86400

        return calculate_ab_test_insights(counts, days_running=days_running, method=method)

    def _get(self, test_id: str, user_id: Optional[str] = None) -> ABTest:
        test = self._tests.get(test_id)
        if test is None or (user_id is not None and test.user_id != user_id):
            raise ABTestNotFoundError(test_id)
        return test


# Singleton instance
_ab_testing_service_instance = None


def get_ab_testing_service() -> ABTestService:
    """Get singleton ABTestService instance"""
    global _ab_testing_service_instance
    if _ab_testing_service_instance is None:
        _ab_testing_service_instance = ABTestService()
    return _ab_testing_service_instance
