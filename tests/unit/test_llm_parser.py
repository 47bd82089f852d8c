"""Unit tests for LLM response decoding and the backoff driver"""

import pytest
from decimal import Decimal
from finance_tracker.domain.exceptions import (
    LLMServiceError,
    ParseFailureError,
    UpstreamQuotaExhaustedError,
    UpstreamRateLimitedError,
)
from finance_tracker.domain.llm_parser import (
    LLMTransactionParser,
    build_prompt,
    decode_parsed_transaction,
    strip_code_fence,
)
from finance_tracker.domain.retry import (
    LLMFailure,
    LLMOk,
    QuotaExhausted,
    RateLimited,
    backoff_delay,
    call_with_backoff,
)

GOOD_JSON = '{"amount": 6.5, "category": "Food & Dining", "description": "Coffee", "type": "expense", "confidence": 0.92}'


class ScriptedCompleter:
    """Returns queued outcomes in order and records prompts"""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        return self.outcomes.pop(0)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def test_build_prompt_embeds_text():
    prompt = build_prompt("Gas station $40")
    assert 'Text: "Gas station $40"' in prompt
    assert prompt.endswith("Output JSON:")


@pytest.mark.parametrize(
    "raw",
    [
        GOOD_JSON,
        f"```json\n{GOOD_JSON}\n```",
        f"```\n{GOOD_JSON}\n```",
        f"  ```json {GOOD_JSON} ```  ",
    ],
)
def test_strip_code_fence(raw):
    assert strip_code_fence(raw) == GOOD_JSON


def test_decode_valid_response():
    parsed = decode_parsed_transaction(f"```json\n{GOOD_JSON}\n```")

    assert parsed.amount == Decimal("6.5")
    assert parsed.category == "Food & Dining"
    assert parsed.description == "Coffee"
    assert parsed.type == "expense"
    assert parsed.confidence == 0.92


def test_decode_nulls_fall_back_to_defaults():
    parsed = decode_parsed_transaction(
        '{"amount": null, "category": "Groceries", "description": null, "type": "transfer", "confidence": 7}'
    )

    assert parsed.amount == Decimal("0")
    assert parsed.category == "Other"
    assert parsed.description == "Transaction"
    assert parsed.type == "expense"
    assert parsed.confidence == 1.0


def test_decode_normalizes_category_case_and_negative_amount():
    parsed = decode_parsed_transaction('{"amount": -12.5, "category": "shopping", "type": "Expense"}')

    assert parsed.amount == Decimal("12.5")
    assert parsed.category == "Shopping"
    assert parsed.type == "expense"


def test_decode_non_json_raises_with_raw_text():
    raw = "Sorry, I cannot help with that."
    with pytest.raises(ParseFailureError) as exc_info:
        decode_parsed_transaction(raw)
    assert exc_info.value.raw_text == raw


def test_decode_json_array_is_rejected():
    with pytest.raises(ParseFailureError):
        decode_parsed_transaction("[1, 2, 3]")


def test_backoff_delay_doubles_and_respects_retry_after():
    assert [backoff_delay(n, 1.0) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]
    assert backoff_delay(0, 0.5, retry_after=3.0) == 3.0
    assert backoff_delay(3, 0.5, retry_after=1.0) == 4.0


async def test_call_with_backoff_retries_only_rate_limits():
    completer = ScriptedCompleter(RateLimited(), RateLimited(), LLMOk("done"))
    sleep = RecordingSleep()

    outcome = await call_with_backoff(lambda: completer.complete("p"), max_retries=3, base_delay=1.0, sleep=sleep)

    assert outcome == LLMOk("done")
    assert sleep.delays == [1.0, 2.0]
    assert len(completer.prompts) == 3


async def test_call_with_backoff_gives_up_after_max_retries():
    completer = ScriptedCompleter(*[RateLimited(retry_after=None)] * 4)
    sleep = RecordingSleep()

    outcome = await call_with_backoff(lambda: completer.complete("p"), max_retries=3, base_delay=0.5, sleep=sleep)

    assert isinstance(outcome, RateLimited)
    assert sleep.delays == [0.5, 1.0, 2.0]
    assert len(completer.prompts) == 4


@pytest.mark.parametrize("outcome", [QuotaExhausted("no credit"), LLMFailure("boom")])
async def test_call_with_backoff_does_not_retry_other_failures(outcome):
    completer = ScriptedCompleter(outcome)
    sleep = RecordingSleep()

    result = await call_with_backoff(lambda: completer.complete("p"), max_retries=3, base_delay=1.0, sleep=sleep)

    assert result == outcome
    assert sleep.delays == []


async def test_llm_parser_success_after_rate_limit():
    completer = ScriptedCompleter(RateLimited(retry_after=2.0), LLMOk(GOOD_JSON))
    sleep = RecordingSleep()
    parser = LLMTransactionParser(completer, max_retries=3, backoff_base=1.0, sleep=sleep)

    parsed = await parser.parse("Coffee $6.50")

    assert parsed.category == "Food & Dining"
    assert sleep.delays == [2.0]
    assert 'Text: "Coffee $6.50"' in completer.prompts[0]


async def test_llm_parser_rate_limit_exhausted():
    completer = ScriptedCompleter(*[RateLimited(retry_after=5.0)] * 3)
    parser = LLMTransactionParser(completer, max_retries=2, backoff_base=0.1, sleep=RecordingSleep())

    with pytest.raises(UpstreamRateLimitedError) as exc_info:
        await parser.parse("Coffee $6.50")
    assert exc_info.value.retry_after == 5.0


async def test_llm_parser_quota_is_not_retried():
    completer = ScriptedCompleter(QuotaExhausted("billing"))
    sleep = RecordingSleep()
    parser = LLMTransactionParser(completer, sleep=sleep)

    with pytest.raises(UpstreamQuotaExhaustedError):
        await parser.parse("Coffee $6.50")
    assert sleep.delays == []
    assert len(completer.prompts) == 1


async def test_llm_parser_generic_failure():
    parser = LLMTransactionParser(ScriptedCompleter(LLMFailure("LLM API error: 500")), sleep=RecordingSleep())

    with pytest.raises(LLMServiceError, match="500"):
        await parser.parse("Coffee $6.50")


async def test_llm_parser_malformed_output():
    parser = LLMTransactionParser(ScriptedCompleter(LLMOk("not json")), sleep=RecordingSleep())

    with pytest.raises(ParseFailureError) as exc_info:
        await parser.parse("Coffee $6.50")
    assert exc_info.value.raw_text == "not json"
