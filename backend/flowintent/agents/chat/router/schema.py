"""
Routing JSON Schema
Defines the structures exchanged between the keyword router, the LLM intent
classifier and the chat endpoint
"""

from typing import Literal, Optional, List, get_args
from pydantic import BaseModel, ConfigDict, Field


AgentType = Literal["seo-aeo", "content", "general", "onboarding"]

RecommendedAgent = Literal["seo-aeo", "content", "general"]

IntentCategory = Literal[
    "keyword_research",
    "serp_analysis",
    "competitor_analysis",
    "domain_metrics",
    "backlinks",
    "content_optimization",
    "youtube_seo",
    "trends",
    "technical_seo",
    "web_scraping",
    "ai_platforms",
    "research",
    "general",
]

VALID_INTENTS = get_args(IntentCategory)
VALID_AGENTS = get_args(AgentType)


class ExtractedEntities(BaseModel):
    """Entities the classifier pulled out of the query"""

    domains: Optional[List[str]] = Field(default=None, description="Any domains mentioned")
    keywords: Optional[List[str]] = Field(default=None, description="Any keywords/topics mentioned")
    location: Optional[str] = Field(default=None, description="Any location/region mentioned")


class RawIntentClassification(BaseModel):
    """
    Permissive shape accepted from the LLM

    Intent and agent fields are plain strings here; they are cleaned up by
    ``sanitize_classification`` before anything downstream sees them.
    """

    model_config = ConfigDict(populate_by_name=True)

    primary_intent: str = Field(
        alias="primaryIntent",
        description="The primary intent of the user query"
    )

    secondary_intents: Optional[List[str]] = Field(
        default=None,
        alias="secondaryIntents",
        description="Additional intents that may be relevant (0-2)"
    )

    recommended_agent: Optional[str] = Field(
        default=None,
        alias="recommendedAgent",
        description="Which agent should handle this"
    )

    confidence: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Confidence in the classification (0-1)"
    )

    reasoning: Optional[str] = Field(
        default=None,
        description="Brief explanation of why this intent was selected"
    )

    extracted_entities: Optional[ExtractedEntities] = Field(
        default=None,
        alias="extractedEntities"
    )


class IntentClassification(BaseModel):
    """Sanitized intent classification"""

    primary_intent: IntentCategory
    secondary_intents: List[IntentCategory] = Field(default_factory=list, max_length=2)
    recommended_agent: RecommendedAgent = "general"
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    reasoning: str = "Classified based on query analysis"
    extracted_entities: Optional[ExtractedEntities] = None


class IntentRoutingResult(BaseModel):
    """Classification plus the focused tool subset"""

    classification: IntentClassification
    tools: List[str] = Field(default_factory=list)
    all_intents: List[IntentCategory] = Field(default_factory=list)


class AgentRoutingResult(BaseModel):
    """Keyword router output"""

    agent: AgentType
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    tools: List[str] = Field(default_factory=list)


class ClassificationResult(BaseModel):
    """Final routing decision handed to the chat endpoint"""

    agent: AgentType
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    tools: List[str] = Field(default_factory=list)
    classification: Optional[IntentClassification] = None
    all_intents: List[str] = Field(default_factory=list)


class AgentMetadata(BaseModel):
    """Metadata for each agent persona"""

    id: AgentType = Field(description="Agent identifier (e.g., 'seo-aeo')")
    name: str = Field(description="Human-readable agent name")
    description: str = Field(description="What this agent handles")
    keywords: List[str] = Field(
        default_factory=list,
        description="Example keywords that route to this agent"
    )


AGENT_METADATA = [
    AgentMetadata(
        id="onboarding",
        name="Onboarding Assistant",
        description="Guides new users through profile, brand voice, competitors, goals and CMS setup",
        keywords=["setup", "getting started", "api key", "tutorial"]
    ),
    AgentMetadata(
        id="seo-aeo",
        name="SEO/AEO Analyst",
        description="Keyword research, SERP, competitor, backlink, trends and technical SEO analysis",
        keywords=["keyword", "backlink", "serp", "competitor", "ranking", "traffic"]
    ),
    AgentMetadata(
        id="content",
        name="Content Writer",
        description="Researched long-form content creation, optimization and humanization",
        keywords=["write", "blog post", "article", "rewrite", "humanize"]
    ),
    AgentMetadata(
        id="general",
        name="General Assistant",
        description="General SEO questions and guidance",
        keywords=[]
    ),
]
