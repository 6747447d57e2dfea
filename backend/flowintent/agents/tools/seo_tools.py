"""
Built-in SEO tools

- suggest_keywords: deterministic keyword suggestions for a topic
- n8n_backlinks: backlinks for a domain via the n8n webhook, normalized from
  the various payload shapes the webhook may forward (flat arrays, wrapped
  arrays, DataForSEO task envelopes)
"""

import re
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlsplit

import requests
from pydantic import BaseModel, Field

from ...services.rate_limiter import MinIntervalRateLimiter
from ..shared.config import get_config
from ..shared.errors import ProviderError, RateLimitError
from ..shared.retry import with_retry
from ..shared.structured_logger import get_logger
from .registry import Tool

logger = get_logger("SEOTools")

BACKLINKS_PROVIDER = "n8n_backlinks"
DATAFORSEO_OK_STATUS = 20000
EXAMPLE_BACKLINKS_LIMIT = 10

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOSTNAME_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)*$")


# ============================================================================
# Keyword suggestions
# ============================================================================

# (template, volume multiplier, difficulty, cpc, intent)
KEYWORD_TEMPLATES = [
    ("{topic} tools", 1.5, 65, 2.50, "Commercial"),
    ("best {topic}", 1.2, 72, 3.20, "Commercial"),
    ("how to do {topic}", 3.0, 45, 1.10, "Informational"),
    ("{topic} strategy", 0.8, 55, 4.50, "Informational"),
    ("{topic} services", 0.5, 80, 8.50, "Transactional"),
    ("cheap {topic}", 0.4, 30, 1.50, "Transactional"),
    ("{topic} guide", 0.9, 40, 0.80, "Informational"),
    ("{topic} software", 0.7, 75, 5.00, "Commercial"),
]


class SuggestKeywordsInput(BaseModel):
    topic: str = Field(min_length=1, description="The main topic to generate keywords for")


def suggest_keywords(topic: str) -> Dict[str, Any]:
    """
    Related keyword suggestions with volume, difficulty, CPC and intent

    Volumes scale with the topic length; the output is deterministic and
    meant as a placeholder until a keyword data provider is wired in.
    """
    logger.info("Generating keyword suggestions", topic=topic)

    base_volume = len(topic) * 1000
    keywords = [
        {
            "keyword": template.format(topic=topic),
            "volume": int(round(base_volume * multiplier)),
            "difficulty": difficulty,
            "cpc": cpc,
            "intent": intent,
        }
        for template, multiplier, difficulty, cpc, intent in KEYWORD_TEMPLATES
    ]

    return {
        "status": "success",
        "topic": topic,
        "keywords": keywords,
    }


# ============================================================================
# Backlinks
# ============================================================================

class BacklinksInput(BaseModel):
    domain: str = Field(description="The domain to fetch backlinks for (e.g., 'example.com')")


def _is_hostname(value: Optional[str]) -> bool:
    return bool(value) and _HOSTNAME_RE.match(value) is not None


def normalize_target_domain(value: Any) -> Optional[str]:
    """
    Hostname of a URL or bare domain

    Examples:
        "https://www.example.com/page" -> "www.example.com"
        "example.com" -> "example.com"
        "not a domain" -> None
    """
    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    maybe_url = trimmed if _SCHEME_RE.match(trimmed) else f"https://{trimmed}"
    try:
        hostname = urlsplit(maybe_url).hostname
    except ValueError:
        hostname = None

    if _is_hostname(hostname):
        return hostname

    cleaned = re.sub(r"^www\.", "", trimmed, flags=re.IGNORECASE)
    if not cleaned or " " in cleaned or "." not in cleaned:
        return None
    return cleaned if _is_hostname(cleaned.lower()) else None


def _url_hostname(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    with_scheme = raw if _SCHEME_RE.match(raw) else f"https://{raw}"
    try:
        return urlsplit(with_scheme).hostname or None
    except ValueError:
        return None


def _first_present(item: Dict[str, Any], keys: List[str]) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_backlink_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Map one provider backlink record onto a fixed shape"""
    source_url = _first_present(item, [
        "source_url", "sourceUrl", "from_url", "fromUrl", "url_from",
        "referring_url", "referringUrl", "source", "url",
    ])
    target_url = _first_present(item, [
        "target_url", "targetUrl", "to_url", "toUrl", "url_to",
        "destination_url", "destinationUrl", "target",
    ])
    anchor_text = _first_present(item, ["anchor_text", "anchorText", "anchor", "text"])

    referring_domain = _first_present(item, [
        "referring_domain", "referringDomain", "source_domain", "sourceDomain",
    ])
    if referring_domain is None:
        referring_domain = _url_hostname(source_url)

    if item.get("dofollow") is True:
        link_type = "dofollow"
    elif isinstance(item.get("type"), str):
        link_type = item["type"]
    else:
        link_type = "nofollow"

    return {
        "source_url": source_url,
        "target_url": target_url,
        "anchor_text": anchor_text,
        "referring_domain": referring_domain,
        "type": link_type,
    }


def extract_backlinks_array(payload: Any) -> List[Dict[str, Any]]:
    """Find the backlink records in a provider payload"""
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if not isinstance(payload, dict):
        return []

    for key in ("backlinks", "links", "items", "results", "data", "result", "backlinkData"):
        candidate = payload.get(key)
        if isinstance(candidate, list):
            return [item for item in candidate if isinstance(item, dict)]

    # DataForSEO envelope: tasks[].result[].items
    tasks = payload.get("tasks")
    if isinstance(tasks, list):
        for task in tasks:
            if not isinstance(task, dict):
                continue
            result = task.get("result")
            if isinstance(result, list):
                for res in result:
                    if isinstance(res, dict) and isinstance(res.get("items"), list):
                        return [item for item in res["items"] if isinstance(item, dict)]
            elif isinstance(result, dict) and isinstance(result.get("items"), list):
                return [item for item in result["items"] if isinstance(item, dict)]

    return []


def _provider_error(domain: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Error result for DataForSEO-style in-body failures (HTTP 200 with an error status)"""
    top_status = payload.get("status_code") if _is_number(payload.get("status_code")) else None
    tasks_error = payload.get("tasks_error") if _is_number(payload.get("tasks_error")) else None

    if not ((top_status and top_status != DATAFORSEO_OK_STATUS) or (tasks_error and tasks_error > 0)):
        return None

    tasks = payload.get("tasks")
    first_task = tasks[0] if isinstance(tasks, list) and tasks and isinstance(tasks[0], dict) else {}
    task_message = first_task.get("status_message") if isinstance(first_task.get("status_message"), str) else None
    task_status = first_task.get("status_code") if _is_number(first_task.get("status_code")) else None

    return {
        "status": "error",
        "success": False,
        "domain": domain,
        "error_message": task_message or "Backlinks provider returned an error",
        "provider_status_code": top_status,
        "provider_task_status_code": task_status,
    }


def _explicit_referring_domains_count(payload: Dict[str, Any]) -> Optional[int]:
    for key in ("referringDomainsCount", "referring_domains_count", "ref_domains_count"):
        if _is_number(payload.get(key)):
            return payload[key]

    tasks = payload.get("tasks")
    if isinstance(tasks, list) and tasks and isinstance(tasks[0], dict):
        result = tasks[0].get("result")
        if isinstance(result, list) and result and isinstance(result[0], dict):
            count = result[0].get("referring_domains_count")
            if _is_number(count):
                return count

    return None


def normalize_backlinks_response(domain: str, data: Any) -> Dict[str, Any]:
    """
    Normalize a backlinks payload

    Returns:
        Error result for in-body provider errors, otherwise a success result
        with ``backlinks``, ``backlinks_count``, ``referring_domains_count``
        and up to ten ``example_backlinks``. Extra keys of an object payload
        are passed through without overriding the normalized fields.
    """
    if isinstance(data, dict):
        error = _provider_error(domain, data)
        if error is not None:
            return error

    backlinks = [normalize_backlink_item(item) for item in extract_backlinks_array(data)]

    referring_domains_count = _explicit_referring_domains_count(data) if isinstance(data, dict) else None
    if referring_domains_count is None:
        referring_domains_count = len({str(b["referring_domain"]) for b in backlinks if b["referring_domain"]})

    example_backlinks = [
        {
            "source_url": b["source_url"],
            "target_url": b["target_url"],
            "anchor_text": b["anchor_text"],
            "referring_domain": b["referring_domain"],
        }
        for b in backlinks[:EXAMPLE_BACKLINKS_LIMIT]
    ]

    result: Dict[str, Any] = dict(data) if isinstance(data, dict) else {}
    result.update({
        "status": "success",
        "success": True,
        "domain": domain,
        "backlinks": backlinks,
        "backlinks_count": len(backlinks),
        "referring_domains_count": referring_domains_count,
        "example_backlinks": example_backlinks,
    })
    return result


class BacklinksClient:
    """
    n8n backlinks webhook client

    Calls are serialized through a minimum-interval rate limiter and retried
    on rate limits, 5xx responses and network errors.
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        min_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        retries: int = 2,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[MinIntervalRateLimiter] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        config = get_config()

        self.webhook_url = webhook_url or config.backlinks_webhook_url
        self.timeout = timeout if timeout is not None else config.backlinks_timeout
        self.retries = retries
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or MinIntervalRateLimiter(
            config.backlinks_min_interval if min_interval is None else min_interval
        )
        self._sleep = sleep

    def _request(self, domain: str) -> Any:
        self.rate_limiter.wait()

        response = self.session.get(
            self.webhook_url,
            params={"domain": domain},
            headers={"Accept": "application/json"},
            timeout=self.timeout
        )

        if response.status_code == 429:
            raise RateLimitError("Backlinks webhook rate limited", provider=BACKLINKS_PROVIDER)

        if response.status_code >= 400:
            raise ProviderError(
                f"Failed to fetch backlinks: {response.status_code} {response.reason}",
                provider=BACKLINKS_PROVIDER,
                retryable=response.status_code >= 500,
                details={"upstream_status": response.status_code, "body": response.text[:500]}
            )

        return response.json()

    def fetch(self, domain: str) -> Dict[str, Any]:
        """
        Backlinks for a domain

        Never raises for provider failures; they come back as
        ``{"status": "error", "success": False, ...}`` results the chat model
        can report to the user.
        """
        normalized = normalize_target_domain(domain)
        if not normalized:
            return {
                "status": "error",
                "success": False,
                "domain": domain,
                "error_message": "Invalid domain. Please provide a domain like example.com",
            }

        logger.info("Fetching backlinks", input=domain, normalized=normalized)

        try:
            data = with_retry(
                lambda: self._request(normalized),
                retries=self.retries,
                provider=BACKLINKS_PROVIDER,
                sleep=self._sleep
            )
        except ProviderError as e:
            logger.error("Backlinks webhook failed", domain=normalized, error=e.message, details=e.details)
            return {
                "status": "error",
                "success": False,
                "domain": normalized,
                "error_message": e.message,
            }
        except (requests.RequestException, ValueError) as e:
            logger.error("Backlinks request failed", domain=normalized, error=str(e), error_type=type(e).__name__)
            return {
                "status": "error",
                "success": False,
                "domain": normalized,
                "error_message": str(e) or "Failed to fetch backlinks data",
            }

        logger.info(
            "Backlinks response received",
            domain=normalized,
            is_list=isinstance(data, list),
            keys=list(data.keys()) if isinstance(data, dict) else []
        )

        return normalize_backlinks_response(normalized, data)


# ============================================================================
# Tool factories
# ============================================================================

def build_suggest_keywords_tool() -> Tool:
    return Tool(
        name="suggest_keywords",
        description=(
            "Suggest related keywords with metrics (volume, difficulty, CPC). Use this when the user "
            "asks for keyword suggestions, keyword ideas, or related terms."
        ),
        input_schema=SuggestKeywordsInput,
        execute=suggest_keywords,
        category="keyword_research"
    )


def build_backlinks_tool(client: Optional[BacklinksClient] = None) -> Tool:
    backlinks_client = client or BacklinksClient()
    return Tool(
        name="n8n_backlinks",
        description=(
            "Fetch backlinks data for a domain using the n8n webhook integration. Use this when the user "
            "asks for backlinks, referring domains, link profile, or link building opportunities for a "
            "specific domain or website."
        ),
        input_schema=BacklinksInput,
        execute=backlinks_client.fetch,
        category="backlinks"
    )
