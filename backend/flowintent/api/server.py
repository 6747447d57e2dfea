"""
FlowIntent API Server
FastAPI backend exposing agent routing, tool assembly and A/B testing
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, get_args

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from ..agents.chat.intent_classifier import IntentClassifier, build_agent_system_prompt, get_intent_classifier
from ..agents.chat.router.schema import AGENT_METADATA
from ..agents.shared.errors import AppError
from ..agents.shared.structured_logger import get_logger
from ..agents.tools.registry import ToolRegistry
from ..agents.tools.tool_assembler import assemble_tools, build_default_registry
from ..analytics.ab_insights import VariantCounts, calculate_ab_test_insights
from ..services.ab_testing import ABTestService, VariantType, get_ab_testing_service

logger = get_logger("APIServer")

# Initialize FastAPI
app = FastAPI(
    title="FlowIntent API",
    description="Chat agent routing, tool loading and A/B test insights",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning(
        "Request failed",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.to_dict()})


# ============================================================================
# Dependencies
# ============================================================================

_tool_registry_instance = None


def get_tool_registry() -> ToolRegistry:
    """Registry shared by all requests"""
    global _tool_registry_instance
    if _tool_registry_instance is None:
        _tool_registry_instance = build_default_registry()
    return _tool_registry_instance


def require_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


# ============================================================================
# Request/Response Models
# ============================================================================

class ClassifyRequest(BaseModel):
    """Chat classification request"""
    query: str = Field(..., min_length=1, description="User message")
    context: Optional[Dict[str, Any]] = Field(None, description="Page context (page, onboarding)")


class ClassifyResponse(BaseModel):
    """Chat classification response"""
    agent: str
    confidence: float
    reasoning: str
    tools: List[str]
    all_intents: List[str]
    classification: Optional[Dict[str, Any]] = None
    system_prompt: str


class ToolsRequest(BaseModel):
    """Tool assembly request"""
    agent: str = Field(..., description="Agent id (seo-aeo, content, general, onboarding)")
    intent_tools: List[str] = Field(default_factory=list, description="Tool names from intent classification")


class ToolsResponse(BaseModel):
    agent: str
    tools: List[str]
    count: int


ABTestAction = Literal[
    "create",
    "start",
    "pause",
    "complete",
    "record_impression",
    "record_click",
    "get_variant",
]


class ABTestActionRequest(BaseModel):
    """A/B testing action request"""
    action: str = Field(..., description="One of: " + ", ".join(get_args(ABTestAction)))
    test_id: Optional[str] = Field(None, description="Target test (all actions except create)")
    variant_id: Optional[str] = Field(None, description="Variant for impression/click tracking")
    session_id: Optional[str] = Field(None, description="Anonymous visitor id for get_variant")

    # create
    name: Optional[str] = None
    description: str = ""
    content_id: Optional[str] = None
    original_content: Optional[str] = None
    variant_type: VariantType = "headline"
    variations: Optional[List[str]] = Field(None, description="Explicit variations; generated when omitted")
    variation_count: int = Field(3, ge=1, le=10)


class VariantCountsPayload(BaseModel):
    impressions: int = Field(0, ge=0)
    clicks: int = Field(0, ge=0)

    @model_validator(mode="after")
    def clicks_within_impressions(self):
        if self.clicks > self.impressions:
            raise ValueError("clicks cannot exceed impressions")
        return self


class InsightsRequest(BaseModel):
    """Stateless insights over raw counts"""
    variant_results: Dict[str, VariantCountsPayload]
    days_running: Optional[float] = Field(None, ge=0)
    method: Literal["approximate", "exact"] = "approximate"


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "service": "FlowIntent API",
        "version": "1.0.0",
        "status": "operational",
        "endpoints": {
            "agents": "/v1/agents",
            "classify": "/v1/chat/classify",
            "tools": "/v1/chat/tools",
            "ab_testing": "/v1/ab-testing",
            "docs": "/docs",
            "health": "/health"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "router": "ready",
            "tools": "ready",
            "ab_testing": "ready"
        }
    }


@app.get("/v1/agents")
async def list_agents():
    """List the agent personas"""
    return {"agents": [agent.model_dump() for agent in AGENT_METADATA]}


@app.post("/v1/chat/classify", response_model=ClassifyResponse)
def classify_chat(
    request: ClassifyRequest,
    classifier: IntentClassifier = Depends(get_intent_classifier)
):
    """
    Classify a chat message into agent persona + tools

    Returns the routing decision together with the system prompt the
    selected agent should run with.
    """
    result = classifier.classify(request.query, request.context)
    system_prompt = build_agent_system_prompt(result.agent, request.context, result.all_intents)

    return ClassifyResponse(
        agent=result.agent,
        confidence=result.confidence,
        reasoning=result.reasoning,
        tools=result.tools,
        all_intents=result.all_intents,
        classification=result.classification.model_dump() if result.classification else None,
        system_prompt=system_prompt
    )


@app.post("/v1/chat/tools", response_model=ToolsResponse)
def assemble_chat_tools(
    request: ToolsRequest,
    registry: ToolRegistry = Depends(get_tool_registry)
):
    """Validated tool names for an agent turn"""
    tools = assemble_tools(request.agent, registry, request.intent_tools)
    return ToolsResponse(agent=request.agent, tools=list(tools.keys()), count=len(tools))


# ============================================================================
# A/B Testing API
# ============================================================================

def _require(value: Optional[str], field: str) -> str:
    if not value:
        raise HTTPException(status_code=400, detail=f"{field} is required")
    return value


@app.post("/v1/ab-testing")
def ab_testing_action(
    request: ABTestActionRequest,
    user_id: str = Depends(require_user_id),
    service: ABTestService = Depends(get_ab_testing_service)
):
    """A/B testing action dispatch"""
    action = request.action

    if action == "create":
        test = service.create_test(
            user_id=user_id,
            name=_require(request.name, "name"),
            original_content=_require(request.original_content, "original_content"),
            variant_type=request.variant_type,
            description=request.description,
            content_id=request.content_id,
            variations=request.variations,
            variation_count=request.variation_count
        )
        return {"success": True, "test": test.model_dump(mode="json")}

    if action in ("start", "pause", "complete"):
        test_id = _require(request.test_id, "test_id")
        transition = {
            "start": service.start_test,
            "pause": service.pause_test,
            "complete": service.complete_test,
        }[action]
        test = transition(test_id, user_id)
        return {"success": True, "test": test.model_dump(mode="json")}

    if action in ("record_impression", "record_click"):
        test_id = _require(request.test_id, "test_id")
        variant_id = _require(request.variant_id, "variant_id")
        if action == "record_impression":
            service.record_impression(test_id, variant_id)
        else:
            service.record_click(test_id, variant_id)
        return {"success": True}

    if action == "get_variant":
        test_id = _require(request.test_id, "test_id")
        variant = service.get_variant_for_user(test_id, user_id=user_id, session_id=request.session_id)
        return {"success": True, "variant": variant.model_dump(mode="json") if variant else None}

    raise HTTPException(status_code=400, detail=f"Invalid action: {action}")


@app.get("/v1/ab-testing")
def list_ab_tests(
    status: Optional[Literal["draft", "active", "paused", "completed"]] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(require_user_id),
    service: ABTestService = Depends(get_ab_testing_service)
):
    """User's A/B tests, newest first"""
    tests = service.get_user_tests(user_id, status=status, limit=limit)
    return {"success": True, "tests": [t.model_dump(mode="json") for t in tests]}


@app.get("/v1/ab-testing/{test_id}/insights")
def ab_test_insights(
    test_id: str,
    method: Literal["approximate", "exact"] = Query("approximate"),
    user_id: str = Depends(require_user_id),
    service: ABTestService = Depends(get_ab_testing_service)
):
    """Insights for a stored test"""
    insights = service.calculate_insights(test_id, user_id=user_id, method=method)
    return {"success": True, "test_id": test_id, "insights": insights.to_dict()}


@app.post("/v1/ab-testing/insights")
def raw_ab_test_insights(request: InsightsRequest):
    """Insights over raw per-variant counts"""
    counts = {
        variant_id: VariantCounts(impressions=c.impressions, clicks=c.clicks)
        for variant_id, c in request.variant_results.items()
    }
    insights = calculate_ab_test_insights(counts, days_running=request.days_running, method=request.method)
    return {"success": True, "insights": insights.to_dict()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "flowintent.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
