"""
Intent-Based Tool Router

Two-tier tool selection:
- Tier 1: a lightweight model classifies the user intent
- Tier 2: the execution model only receives the tools mapped to that intent
  (a handful instead of the whole catalogue)
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ...shared.bedrock_adapter import BedrockLLM, extract_json_text
from ...shared.config import get_config
from ...shared.errors import IntentClassificationError
from ...shared.structured_logger import LogTimer, get_logger
from ..prompts import get_intent_addendum
from .schema import (
    IntentCategory,
    IntentClassification,
    IntentRoutingResult,
    RawIntentClassification,
    VALID_INTENTS,
)


INTENT_TOOL_MAP: Dict[str, List[str]] = {
    "keyword_research": [
        "keywords_data_google_ads_search_volume",
        "dataforseo_labs_google_keyword_ideas",
        "dataforseo_labs_google_keyword_suggestions",
        "dataforseo_labs_google_keyword_overview",
        "dataforseo_labs_google_related_keywords",
        "dataforseo_labs_google_keywords_for_site",
        "dataforseo_labs_bulk_keyword_difficulty",
        "dataforseo_labs_search_intent",
    ],
    "serp_analysis": [
        "serp_organic_live_advanced",
        "dataforseo_labs_google_serp_competitors",
        "dataforseo_labs_google_historical_serp",
        "dataforseo_labs_google_top_searches",
        "serp_locations",
    ],
    "competitor_analysis": [
        "dataforseo_labs_google_competitors_domain",
        "dataforseo_labs_google_domain_intersection",
        "dataforseo_labs_google_page_intersection",
        "dataforseo_labs_google_ranked_keywords",
        "dataforseo_labs_google_relevant_pages",
        "dataforseo_labs_google_subdomains",
    ],
    "domain_metrics": [
        "dataforseo_labs_google_domain_rank_overview",
        "dataforseo_labs_google_historical_rank_overview",
        "dataforseo_labs_bulk_traffic_estimation",
        "domain_analytics_whois_overview",
        "domain_analytics_technologies_domain_technologies",
    ],
    # Webhook only; the DataForSEO backlinks endpoints are inactive
    "backlinks": [
        "n8n_backlinks",
    ],
    "content_optimization": [
        "content_analysis_search",
        "content_analysis_summary",
        "content_analysis_phrase_trends",
    ],
    "youtube_seo": [
        "serp_youtube_organic_live_advanced",
        "serp_youtube_video_info_live_advanced",
        "serp_youtube_video_comments_live_advanced",
        "serp_youtube_video_subtitles_live_advanced",
        "serp_youtube_locations",
    ],
    "trends": [
        "keywords_data_google_trends_explore",
        "keywords_data_dataforseo_trends_explore",
        "keywords_data_dataforseo_trends_demography",
    ],
    "technical_seo": [
        "on_page_lighthouse",
        "on_page_content_parsing",
        "on_page_instant_pages",
    ],
    "web_scraping": [
        "firecrawl_scrape",
        "firecrawl_search",
        "firecrawl_crawl",
        "firecrawl_map",
        "firecrawl_extract",
    ],
    "ai_platforms": [
        "ai_optimization_keyword_data_search_volume",
        "ai_optimization_keyword_data_locations_and_languages",
    ],
    # Research also gets keyword tools for "content ideas" queries
    "research": [
        "perplexity_search",
        "read_url",
        "search_web",
        "keywords_data_google_ads_search_volume",
        "dataforseo_labs_google_keyword_ideas",
        "dataforseo_labs_google_keyword_suggestions",
        "dataforseo_labs_search_intent",
    ],
    "general": [
        "perplexity_search",
        "client_ui",
    ],
}

INTENT_DESCRIPTIONS: Dict[str, str] = {
    "keyword_research": "Finding keywords, search volume, keyword difficulty, keyword suggestions, keyword ideas, content ideas with keywords",
    "serp_analysis": "Analyzing search results, SERP features, ranking positions, what ranks for a query",
    "competitor_analysis": "Comparing domains, finding competitor keywords, keyword gaps, domain overlap",
    "domain_metrics": "Domain authority, traffic estimation, domain overview, WHOIS data, technology stack",
    "backlinks": "Backlink analysis, referring domains, link building, link profile",
    "content_optimization": "Content analysis, content scoring, phrase trends, citation analysis",
    "youtube_seo": "YouTube rankings, video optimization, video comments, YouTube search",
    "trends": "Google Trends, trending topics, trend analysis, popularity over time",
    "technical_seo": "Page speed, Lighthouse audit, technical issues, crawl analysis",
    "web_scraping": "Scraping websites, extracting content, crawling pages, site mapping",
    "ai_platforms": "AI search optimization, ChatGPT/Perplexity visibility, answer engine optimization",
    "research": "General web research, finding information, summarizing content, topic research",
    "general": "General questions, guidance, simple queries",
}

_STRIP_CHARS = ':" \t\r\n'


def sanitize_intent(value: Any) -> IntentCategory:
    """
    Clean an intent string produced by the LLM

    Handles artifacts like ":backlinks", ' "backlinks"' or "backlinks:".
    Anything that is not a known intent becomes "general".
    """
    if not value or not isinstance(value, str):
        return "general"

    cleaned = value.strip(_STRIP_CHARS).lower()
    if cleaned in VALID_INTENTS:
        return cleaned
    return "general"


def sanitize_classification(raw: RawIntentClassification) -> IntentClassification:
    """Convert the permissive LLM output into a clean IntentClassification"""
    primary_intent = sanitize_intent(raw.primary_intent)

    secondary_intents = [
        intent for intent in (sanitize_intent(i) for i in (raw.secondary_intents or []))
        if intent != primary_intent
    ][:2]

    raw_agent = (raw.recommended_agent or "").lower().strip()
    if "seo" in raw_agent or "aeo" in raw_agent:
        recommended_agent = "seo-aeo"
    elif "content" in raw_agent:
        recommended_agent = "content"
    else:
        recommended_agent = "general"

    return IntentClassification(
        primary_intent=primary_intent,
        secondary_intents=secondary_intents,
        recommended_agent=recommended_agent,
        confidence=raw.confidence if raw.confidence is not None else 0.8,
        reasoning=raw.reasoning or "Classified based on query analysis",
        extracted_entities=raw.extracted_entities
    )


class IntentToolRouter:
    """
    LLM intent classifier mapping queries to focused tool subsets

    The LLM is any object with a ``generate_sync(prompt, max_tokens,
    temperature)`` method returning ``{"text": ...}``; a BedrockLLM is
    created on first use when none is injected.
    """

    def __init__(self, llm: Optional[Any] = None, model: Optional[str] = None):
        """
        Args:
            llm: LLM client (default: BedrockLLM, created lazily)
            model: Model alias for the default client
        """
        self._llm = llm
        self.model = model or get_config().classifier_model
        self.logger = get_logger("IntentToolRouter")

    @property
    def llm(self):
        if self._llm is None:
            self._llm = BedrockLLM(model=self.model)
        return self._llm

    def classify_intent(self, query: str) -> IntentClassification:
        """
        Tier 1: classify the user intent

        Raises:
            IntentClassificationError: LLM call failed or the response was
                not a valid classification
        """
        prompt = self._build_classifier_prompt(query)

        try:
            with LogTimer(self.logger, "intent_classification", model=self.model):
                result = self.llm.generate_sync(prompt=prompt, max_tokens=500, temperature=0.0)
        except Exception as e:
            self.logger.error("Intent classification LLM call failed", error=str(e), error_type=type(e).__name__)
            raise IntentClassificationError(f"Intent classifier call failed: {e}") from e

        classification = self._parse_classification(result.get("text", ""))

        self.logger.info(
            "Classified intent",
            query=query[:50],
            primary=classification.primary_intent,
            secondary=classification.secondary_intents,
            agent=classification.recommended_agent,
            confidence=classification.confidence
        )

        return classification

    def get_tools_for_intents(self, intents: List[str]) -> List[str]:
        """Union of the mapped tools, in first-seen order, without duplicates"""
        tools: List[str] = []
        seen = set()
        for intent in intents:
            for tool in INTENT_TOOL_MAP.get(intent, []):
                if tool not in seen:
                    seen.add(tool)
                    tools.append(tool)
        return tools

    def classify_and_get_tools(self, query: str) -> IntentRoutingResult:
        """Tier 1 + 2: classify the query and return its focused tool subset"""
        classification = self.classify_intent(query)

        all_intents = [classification.primary_intent] + list(classification.secondary_intents)
        tools = self.get_tools_for_intents(all_intents)

        self.logger.info(
            "Tools selected",
            intents=all_intents,
            tool_count=len(tools),
            tools=tools[:10]
        )

        return IntentRoutingResult(
            classification=classification,
            tools=tools,
            all_intents=all_intents
        )

    def get_intent_system_prompt_addendum(self, intents: List[str]) -> str:
        """Focused system prompt addendum for the primary intent"""
        return get_intent_addendum(intents)

    def _build_classifier_prompt(self, query: str) -> str:
        intent_list = "\n".join(
            f"- {intent}: {description}" for intent, description in INTENT_DESCRIPTIONS.items()
        )

        return f"""You are an SEO/AEO intent classifier. Analyze the user query and classify their intent.

IMPORTANT: Return EXACT enum values without any prefixes like colons. For example, use "backlinks" NOT ":backlinks".

USER QUERY: "{query}"

AVAILABLE INTENT CATEGORIES:
{intent_list}

AGENT SELECTION RULES:
- seo-aeo: Use for keyword research, SERP analysis, competitor analysis, domain metrics, backlinks, trends, technical SEO, content IDEAS
- content: Use ONLY when user explicitly asks to WRITE/CREATE/GENERATE a full blog post or article
- general: Use for simple questions or chat

EXAMPLES:
- "content ideas with keywords" -> primaryIntent: "keyword_research", recommendedAgent: "seo-aeo"
- "write a blog post about SEO" -> primaryIntent: "content_optimization", recommendedAgent: "content"
- "analyze backlinks for competitor.com" -> primaryIntent: "backlinks", recommendedAgent: "seo-aeo"

Respond with a single JSON object:
```json
{{
  "primaryIntent": "<intent>",
  "secondaryIntents": ["<intent>", "..."],
  "recommendedAgent": "seo-aeo | content | general",
  "confidence": 0.0-1.0,
  "reasoning": "<one sentence>",
  "extractedEntities": {{"domains": [], "keywords": [], "location": null}}
}}
```"""

    def _parse_classification(self, llm_output: str) -> IntentClassification:
        """
        Parse and sanitize the classifier JSON

        Raises:
            IntentClassificationError: Invalid JSON or schema mismatch
        """
        response_text = extract_json_text(llm_output)

        try:
            raw_dict = json.loads(response_text)
        except json.JSONDecodeError as e:
            self.logger.warning("Intent classifier returned invalid JSON", error=str(e), output=llm_output[:200])
            raise IntentClassificationError(f"Invalid classifier JSON: {e}") from e

        try:
            raw = RawIntentClassification.model_validate(raw_dict)
        except ValidationError as e:
            self.logger.warning("Intent classifier output failed validation", error=str(e))
            raise IntentClassificationError(
                "Classifier output failed validation",
                details={"error_count": e.error_count()}
            ) from e

        return sanitize_classification(raw)


# Singleton instance
_intent_tool_router_instance = None


def get_intent_tool_router() -> IntentToolRouter:
    """Get singleton IntentToolRouter instance"""
    global _intent_tool_router_instance
    if _intent_tool_router_instance is None:
        _intent_tool_router_instance = IntentToolRouter()
    return _intent_tool_router_instance
