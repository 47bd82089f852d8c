"""LLM HTTP client returning explicit call outcomes instead of raising"""

import httpx
from typing import Any, Dict, Optional
from finance_tracker.domain.retry import LLMFailure, LLMOk, LLMOutcome, QuotaExhausted, RateLimited
from finance_tracker.config import settings
from finance_tracker.infrastructure.observability.metrics import llm_call_counter, llm_latency_histogram


def _error_code(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("code") or error.get("type") or "")
    return ""


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def extract_output_text(data: Dict[str, Any]) -> str:
    """Concatenate output_text parts of a Responses API payload"""
    if isinstance(data.get("output_text"), str):
        return data["output_text"]

    parts = []
    for item in data.get("output", []):
        if item.get("type") != "message":
            continue
        for content in item.get("content", []):
            if content.get("type") == "output_text":
                parts.append(content.get("text", ""))
    return "".join(parts)


class LLMClient:
    """Client for an OpenAI-compatible Responses API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.llm_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.llm_api_key
        self.model = model or settings.llm_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _classify(self, response: httpx.Response) -> LLMOutcome:
        if response.status_code == 429:
            if _error_code(response) == "insufficient_quota":
                return QuotaExhausted("LLM quota exceeded. Please check your billing details.")
            return RateLimited(retry_after=_retry_after(response))

        if response.status_code >= 400:
            return LLMFailure(f"LLM API error: {response.status_code}")

        try:
            return LLMOk(extract_output_text(response.json()))
        except (ValueError, AttributeError, TypeError) as e:
            return LLMFailure(f"Invalid LLM response: {e}")

    async def complete(self, prompt: str) -> LLMOutcome:
        """
        Send a single prompt. Never raises for upstream problems.

        Returns:
            LLMOk, RateLimited, QuotaExhausted or LLMFailure
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with llm_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/responses",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json={"model": self.model, "input": prompt},
                    )
            except httpx.TimeoutException:
                outcome: LLMOutcome = LLMFailure(f"LLM timeout after {self.timeout}s")
            except httpx.RequestError as e:
                outcome = LLMFailure(f"LLM unreachable: {e}")
            else:
                outcome = self._classify(response)

        llm_call_counter.labels(outcome=type(outcome).__name__).inc()
        return outcome
