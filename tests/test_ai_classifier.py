import asyncio
import json
import math
from typing import Any

import httpx
import pytest

from ai import AiClassifier, CompletionError, HttpCompletionClient, build_prompt, parse_ai_response
from categorization import Categorizer, FileCategory

CONTENT = "Quarterly budget review covering revenue, cash flow and capital spending for the year."


class FakeClient:
    def __init__(self, response: Any = None, error: Exception | None = None, delay: float = 0.0) -> None:
        self.response = response
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> dict[str, Any]:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


def classify(classifier: AiClassifier, content: str | None = CONTENT):
    return asyncio.run(
        classifier.classify_with_content("Q3_Budget_Forecast.xlsx", "/Finance/2024/", "", content)
    )


def test_short_content_skips_remote_call() -> None:
    client = FakeClient(response={"category": "OFFICE", "confidence": 0.99})
    classifier = AiClassifier(Categorizer(), client)

    result = classify(classifier, content="   too short   ")

    assert client.prompts == []
    assert result.category is FileCategory.FINANCE
    assert result.keywords == ["budget", "forecast"]
    assert result.summary is None
    assert result.entities is None


def test_missing_content_returns_rule_result() -> None:
    rule_result = Categorizer().categorize_file("Q3_Budget_Forecast.xlsx", "/Finance/2024/", "")

    result = classify(AiClassifier(Categorizer(), FakeClient()), content=None)

    assert result.confidence == rule_result.confidence
    assert result.reason == rule_result.reason


def test_ai_result_is_combined_with_rules() -> None:
    client = FakeClient(
        response={
            "category": "ACCOUNTING",
            "confidence": 0.92,
            "reason": "Looks like a ledger",
            "keywords": ["ledger"],
            "summary": "A ledger.",
            "entities": ["ACME"],
        }
    )

    result = classify(AiClassifier(Categorizer(), client))

    assert len(client.prompts) == 1
    assert result.category is FileCategory.ACCOUNTING
    assert result.reason == "AI: Looks like a ledger (Rule-based suggested: FINANCE)"
    assert result.summary == "A ledger."


def test_remote_failure_falls_back_to_rules() -> None:
    classifier = AiClassifier(Categorizer(), FakeClient(error=CompletionError("HTTP 500")))

    result = classify(classifier)

    assert result.category is FileCategory.FINANCE
    assert result.reason.endswith(" (AI analysis failed, used rule-based)")
    assert result.keywords == ["budget", "forecast"]


def test_unexpected_error_falls_back_to_rules() -> None:
    classifier = AiClassifier(Categorizer(), FakeClient(error=ConnectionResetError("reset")))

    assert classify(classifier).reason.endswith("(AI analysis failed, used rule-based)")


def test_unknown_category_falls_back_to_rules() -> None:
    classifier = AiClassifier(Categorizer(), FakeClient(response={"category": "MARKETING", "confidence": 0.9}))

    result = classify(classifier)

    assert result.category is FileCategory.FINANCE
    assert "AI analysis failed" in result.reason


def test_slow_completion_times_out_to_rules() -> None:
    client = FakeClient(response={"category": "OFFICE", "confidence": 0.99}, delay=1.0)
    classifier = AiClassifier(Categorizer(), client, timeout_seconds=0.01)

    result = classify(classifier)

    assert result.category is FileCategory.FINANCE
    assert "AI analysis failed" in result.reason


def test_parse_ai_response_clamps_and_defaults() -> None:
    assert parse_ai_response({"category": "finance", "confidence": 3}).confidence == 1.0
    assert parse_ai_response({"category": "FINANCE", "confidence": -0.2}).confidence == 0.0
    assert parse_ai_response({"category": "FINANCE", "confidence": "high"}).confidence == 0.5
    assert parse_ai_response({"category": "FINANCE", "confidence": True}).confidence == 0.5

    parsed = parse_ai_response({"category": "OFFICE", "keywords": "not-a-list"})
    assert parsed.confidence == 0.5
    assert parsed.keywords == []
    assert parsed.reason == "AI categorization"

    with pytest.raises(CompletionError):
        parse_ai_response({"confidence": 0.9})


def test_prompt_embeds_file_details_and_truncates_content() -> None:
    prompt = build_prompt("plan.pdf", "/Design/", "x" * 3000)

    assert "Filename: plan.pdf" in prompt
    assert "Path: /Design/" in prompt
    assert "x" * 2000 + "..." in prompt
    assert "x" * 2001 not in prompt
    for name in ("OPERATIONS", "ESTIMATING", "ACCOUNTING", "FINANCE", "OFFICE", "COMPANY_LAYOUT", "UNCATEGORIZED"):
        assert f"- {name}:" in prompt


def test_http_client_posts_json_request() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        content = json.dumps({"category": "FINANCE", "confidence": 0.8})
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    client = HttpCompletionClient(
        endpoint="https://llm.test/v1/chat/completions",
        model="test-model",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )

    data = asyncio.run(client.complete("hello"))

    assert data == {"category": "FINANCE", "confidence": 0.8}
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["messages"] == [{"role": "user", "content": "hello"}]
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert seen["body"]["temperature"] == 0.3
    assert seen["body"]["max_tokens"] == 500


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": "[1, 2]"}}]}),
    ],
)
def test_http_client_rejects_bad_responses(response: httpx.Response) -> None:
    client = HttpCompletionClient(transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(CompletionError):
        asyncio.run(client.complete("hello"))


def test_http_client_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = HttpCompletionClient(transport=httpx.MockTransport(handler))

    with pytest.raises(CompletionError):
        asyncio.run(client.complete("hello"))


def test_non_finite_confidence_defaults() -> None:
    assert parse_ai_response({"category": "OFFICE", "confidence": float("nan")}).confidence == 0.5
    assert parse_ai_response({"category": "OFFICE", "confidence": float("inf")}).confidence == 0.5


def test_nan_confidence_from_endpoint_stays_in_range() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        content = '{"category": "OFFICE", "confidence": NaN}'
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    client = HttpCompletionClient(transport=httpx.MockTransport(handler))

    result = classify(AiClassifier(Categorizer(), client))

    assert not math.isnan(result.confidence)
    assert 0.0 <= result.confidence <= 1.0
    json.dumps(result.to_dict(), allow_nan=False)


def test_cancelled_request_falls_back_to_rules() -> None:
    classifier = AiClassifier(Categorizer(), FakeClient(error=asyncio.CancelledError()))

    result = classify(classifier)

    assert result.category is FileCategory.FINANCE
    assert result.reason.endswith(" (AI analysis failed, used rule-based)")


def test_cancelling_the_caller_propagates() -> None:
    client = FakeClient(response={"category": "OFFICE", "confidence": 0.99}, delay=5.0)
    classifier = AiClassifier(Categorizer(), client)

    async def run() -> None:
        task = asyncio.create_task(
            classifier.classify_with_content("Q3_Budget_Forecast.xlsx", "/Finance/2024/", "", CONTENT)
        )
        while not client.prompts:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
