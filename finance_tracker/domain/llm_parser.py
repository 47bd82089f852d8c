"""LLM-backed transaction parser with rate-limit backoff"""

import asyncio
import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, Protocol

from finance_tracker.domain.categories import normalize_category
from finance_tracker.domain.exceptions import (
    LLMServiceError,
    ParseFailureError,
    UpstreamQuotaExhaustedError,
    UpstreamRateLimitedError,
)
from finance_tracker.domain.models import EXPENSE, TRANSACTION_TYPES, ParsedTransaction
from finance_tracker.domain.parser import DEFAULT_DESCRIPTION
from finance_tracker.domain.retry import (
    LLMOk,
    LLMOutcome,
    QuotaExhausted,
    RateLimited,
    call_with_backoff,
)

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    "Parse the following transaction text into JSON with fields: amount (number), "
    "category (string), description (string), type ('income' or 'expense'), "
    "confidence (number between 0 and 1). If any field is missing or unclear, "
    'return null for that field.\n\nText: "{text}"\n\nOutput JSON:'
)

FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

DEFAULT_LLM_CONFIDENCE = 0.5


class Completer(Protocol):
    async def complete(self, prompt: str) -> LLMOutcome:
        ...


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(text=text)


def strip_code_fence(response_text: str) -> str:
    """Remove a surrounding ```json ... ``` (or bare ```) block if present"""
    stripped = response_text.strip()
    match = FENCE_PATTERN.match(stripped)
    return match.group(1) if match else stripped


def _to_amount(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return abs(amount)


def _to_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_LLM_CONFIDENCE
    return min(max(float(value), 0.0), 1.0)


def decode_parsed_transaction(response_text: str) -> ParsedTransaction:
    """
    Decode model output into a ParsedTransaction.

    Missing or null fields fall back to defaults; anything that is not a JSON
    object raises ParseFailureError with the raw text attached.
    """
    payload = strip_code_fence(response_text)
    try:
        data: Dict[str, Any] = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseFailureError("Failed to parse AI response", raw_text=response_text) from e

    if not isinstance(data, dict):
        raise ParseFailureError("AI response is not a JSON object", raw_text=response_text)

    txn_type = data.get("type")
    if not isinstance(txn_type, str) or txn_type.lower() not in TRANSACTION_TYPES:
        txn_type = EXPENSE

    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        description = DEFAULT_DESCRIPTION

    category = data.get("category")
    return ParsedTransaction(
        amount=_to_amount(data.get("amount")),
        description=description.strip(),
        category=normalize_category(category if isinstance(category, str) else None),
        type=txn_type.lower(),
        confidence=_to_confidence(data.get("confidence")),
    )


class LLMTransactionParser:
    """Parses transactions through a hosted LLM"""

    name = "llm"

    def __init__(
        self,
        completer: Completer,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.completer = completer
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.sleep = sleep

    def _log_retry(self, attempt: int, delay: float) -> None:
        logger.warning(
            "LLM rate limited, retrying",
            extra={"step": "llm_retry", "attempt": attempt, "delay_seconds": delay},
        )

    async def parse(self, text: str) -> ParsedTransaction:
        """
        Raises:
            UpstreamRateLimitedError: still rate limited after all retries
            UpstreamQuotaExhaustedError: quota exhausted (not retried)
            LLMServiceError: any other upstream failure
            ParseFailureError: model output is not decodable JSON
        """
        prompt = build_prompt(text)
        outcome = await call_with_backoff(
            lambda: self.completer.complete(prompt),
            max_retries=self.max_retries,
            base_delay=self.backoff_base,
            sleep=self.sleep,
            on_retry=self._log_retry,
        )

        if isinstance(outcome, LLMOk):
            return decode_parsed_transaction(outcome.text)
        if isinstance(outcome, RateLimited):
            raise UpstreamRateLimitedError("LLM rate limit exceeded", retry_after=outcome.retry_after)
        if isinstance(outcome, QuotaExhausted):
            raise UpstreamQuotaExhaustedError(outcome.detail or "LLM quota exceeded")
        raise LLMServiceError(outcome.detail or "LLM call failed")
