"""
Keyword Agent Router

Routes a chat message to one of the agent personas (onboarding, seo-aeo,
content, general) with plain keyword matching. Used directly when no LLM is
available and as the fallback of the intent classifier.
"""

from typing import Optional, Dict, Any, List

from .schema import AgentRoutingResult


ONBOARDING_KEYWORDS = [
    "setup", "configure", "getting started", "onboard", "initialize",
    "connect account", "api key", "integration", "first time",
    "how to start", "begin", "tutorial", "walkthrough",
]

SEO_ANALYTICS_KEYWORDS = [
    # Core SEO/AEO terms
    "seo", "aeo", "answer engine", "search engine optimization",

    # Search intent
    "search intent", "intent", "user intent", "query intent",
    "informational", "navigational", "transactional", "commercial intent",

    # Analytics & metrics
    "traffic", "ranking", "position", "visibility", "metrics",
    "analytics", "performance", "audit", "technical seo",

    # Competitor analysis
    "competitor", "competition", "compare", "vs", "against",
    "benchmark", "competitive analysis", "market share",

    # Backlinks & domain analysis
    "backlink", "link building", "domain authority", "domain analysis",
    "link profile", "referring domains", "anchor text",
    "spam score", "link quality", "toxic links", "new backlinks",
    "lost backlinks", "backlink profile", "referring networks",

    # SERP analysis
    "serp", "search results", "google ranking", "featured snippet",
    "people also ask", "related searches", "serp features",

    # Keyword research
    "keyword research", "search volume", "keyword difficulty",
    "keyword suggestions", "keyword trends", "keyword gap",
    "keyword", "keywords", "long tail", "short tail", "seed keyword",
    "cpc", "cost per click", "ppc", "keyword ideas",
    "keyword overview", "top searches", "related keywords",
    "keyword for site", "keywords for site",

    # Ranking / organic
    "rank", "ranks", "ranking for", "organic", "organic search",
    "what ranks", "how to rank", "top ranking",

    # Analysis
    "analyze", "analysis", "site analysis", "website analysis",
    "seo audit", "seo analysis", "seo strategy", "seo tips",

    # Search queries
    "search query", "search queries", "what people search",
    "how people search", "search behavior",

    # Technical SEO
    "crawl", "index", "sitemap", "robots.txt", "page speed",
    "core web vitals", "lighthouse", "technical issues",

    # Web scraping
    "scrape", "scraping", "extract data", "crawl website",
    "website content", "pull data", "fetch page", "get content from",
    "extract content", "site content", "page content",

    # YouTube SEO
    "youtube", "video seo", "youtube ranking", "youtube search",
    "video comments", "video info", "video subtitles", "youtube channel",
    "video optimization", "youtube analytics",

    # Trends
    "trends", "trending", "google trends", "trend analysis",
    "search trends", "trending topics", "trend data",
    "what is trending", "popularity over time",

    # Domain & WHOIS
    "domain", "whois", "domain age", "domain info",
    "domain technologies", "tech stack", "what technologies",
    "site technologies", "cms detection", "technology stack",

    # Traffic estimation
    "traffic estimation", "estimated traffic", "site traffic",
    "traffic volume", "monthly traffic",

    # Historical data
    "historical", "history", "over time", "past performance",
    "ranking history", "historical serp", "historical data",
    "keyword history", "rank history",

    # Business listings
    "business listing", "local seo", "google my business",
    "local listing", "business data",
]

CONTENT_KEYWORDS = [
    # Creation
    "write", "create", "generate", "draft", "compose", "build",
    "make", "develop", "produce", "craft",

    # Content types
    "blog post", "article", "content", "landing page", "copy",
    "email", "social post", "tweet", "headline", "title",
    "meta description", "snippet",

    # Optimization
    "optimize", "improve", "enhance", "rewrite", "edit",
    "humanize", "make more human", "less ai", "more natural",
    "readability", "engagement", "conversion",

    # Quality
    "plagiarism", "ai detection", "originality", "quality",
    "fact check", "verify", "validate",

    # Research
    "research for", "find sources", "gather information",
    "summarize article", "content ideas",
]

ONBOARDING_TOOLS = ["client_ui", "onboarding_progress"]

SEO_AGENT_TOOLS = [
    # Keyword research
    "keywords_data_google_ads_search_volume",
    "dataforseo_labs_google_keyword_ideas",
    "dataforseo_labs_google_keyword_suggestions",
    "dataforseo_labs_google_keyword_overview",
    "dataforseo_labs_bulk_keyword_difficulty",
    "dataforseo_labs_search_intent",
    "dataforseo_labs_google_keywords_for_site",
    "dataforseo_labs_google_related_keywords",

    # SERP analysis
    "serp_organic_live_advanced",
    "serp_locations",
    "dataforseo_labs_google_serp_competitors",
    "dataforseo_labs_google_historical_serp",
    "dataforseo_labs_google_top_searches",

    # YouTube SEO
    "serp_youtube_organic_live_advanced",
    "serp_youtube_video_info_live_advanced",
    "serp_youtube_video_comments_live_advanced",
    "serp_youtube_video_subtitles_live_advanced",
    "serp_youtube_locations",

    # Competitor analysis
    "dataforseo_labs_google_ranked_keywords",
    "dataforseo_labs_google_competitors_domain",
    "dataforseo_labs_google_domain_intersection",
    "dataforseo_labs_google_page_intersection",
    "dataforseo_labs_google_relevant_pages",
    "dataforseo_labs_google_subdomains",

    # Domain analysis
    "dataforseo_labs_google_domain_rank_overview",
    "dataforseo_labs_google_historical_rank_overview",
    "dataforseo_labs_bulk_traffic_estimation",
    "domain_analytics_whois_overview",
    "domain_analytics_technologies_domain_technologies",

    # Backlinks
    "backlinks_summary",
    "backlinks_backlinks",
    "backlinks_referring_domains",
    "backlinks_anchors",
    "backlinks_competitors",
    "backlinks_domain_intersection",
    "backlinks_bulk_backlinks",
    "backlinks_bulk_ranks",
    "backlinks_bulk_spam_score",

    # Trends
    "keywords_data_google_trends_explore",
    "keywords_data_dataforseo_trends_explore",
    "keywords_data_dataforseo_trends_demography",

    # Technical SEO
    "on_page_lighthouse",
    "on_page_content_parsing",
    "on_page_instant_pages",

    # AI/AEO optimization
    "ai_optimization_keyword_data_search_volume",
    "ai_optimization_keyword_data_locations_and_languages",

    # Content analysis
    "content_analysis_search",
    "content_analysis_summary",
    "content_analysis_phrase_trends",

    # Business data
    "business_data_business_listings_search",

    # Firecrawl
    "firecrawl_scrape",
    "firecrawl_search",
    "firecrawl_crawl",
    "firecrawl_map",
    "firecrawl_extract",
    "firecrawl_check_crawl_status",
]

CONTENT_AGENT_TOOLS = [
    "generate_researched_content",
    "perplexity_search",

    # Firecrawl research
    "firecrawl_scrape",
    "firecrawl_search",
    "firecrawl_crawl",

    # Content analysis
    "content_analysis_search",
    "content_analysis_summary",
    "content_analysis_phrase_trends",

    # Keyword optimization
    "keywords_data_google_ads_search_volume",
    "dataforseo_labs_search_intent",
    "dataforseo_labs_google_keyword_suggestions",

    # Jina
    "read_url",
    "search_web",
    "expand_query",
    "parallel_search_web",
    "sort_by_relevance",
]

GENERAL_AGENT_TOOLS = ["web_search_competitors", "perplexity_search", "client_ui"]


class AgentRouter:
    """
    Keyword-based agent router

    Checks, in order: onboarding, SEO analytics, content creation; anything
    else goes to the general agent. Matching is substring containment on the
    lower-cased message, so short keywords like "vs" or "rank" match inside
    longer words too.
    """

    def __init__(self):
        self.onboarding_keywords = list(ONBOARDING_KEYWORDS)
        self.seo_keywords = list(SEO_ANALYTICS_KEYWORDS)
        self.content_keywords = list(CONTENT_KEYWORDS)

    def route_query(self, message: str, context: Optional[Dict[str, Any]] = None) -> AgentRoutingResult:
        """
        Route a message to an agent persona

        Args:
            message: User's chat message
            context: Optional page context (``{"page": "onboarding", ...}``)

        Returns:
            AgentRoutingResult with agent, confidence, reasoning and tools
        """
        context = context or {}
        message_lower = message.lower()

        if context.get("page") == "onboarding" or self._matches_any(message_lower, self.onboarding_keywords):
            return AgentRoutingResult(
                agent="onboarding",
                confidence=0.95,
                reasoning="User is in onboarding flow or asking setup questions",
                tools=list(ONBOARDING_TOOLS)
            )

        if self._matches_any(message_lower, self.seo_keywords):
            return AgentRoutingResult(
                agent="seo-aeo",
                confidence=0.9,
                reasoning="Query requires SEO analytics, competitor analysis, or technical SEO data",
                tools=list(SEO_AGENT_TOOLS)
            )

        if self._matches_any(message_lower, self.content_keywords):
            return AgentRoutingResult(
                agent="content",
                confidence=0.9,
                reasoning="Query requires content creation with research, optimization, and humanization",
                tools=list(CONTENT_AGENT_TOOLS)
            )

        return AgentRoutingResult(
            agent="general",
            confidence=0.7,
            reasoning="General query that doesn't require specialized agent",
            tools=list(GENERAL_AGENT_TOOLS)
        )

    def is_onboarding_query(self, message: str) -> bool:
        """Check if the message asks about setup/onboarding"""
        return self._matches_any(message.lower(), self.onboarding_keywords)

    @staticmethod
    def _matches_any(message: str, keywords: List[str]) -> bool:
        return any(keyword in message for keyword in keywords)


# Singleton instance
_agent_router_instance = None


def get_agent_router() -> AgentRouter:
    """Get singleton AgentRouter instance"""
    global _agent_router_instance
    if _agent_router_instance is None:
        _agent_router_instance = AgentRouter()
    return _agent_router_instance
