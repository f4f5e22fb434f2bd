import json
import math
from types import SimpleNamespace

import httpx
import pytest

from agents.client_inference.agent import ClientInferenceAgent, InferenceConfig, InferenceInput, build_prompt
from agents.client_inference.provider import (
    AnthropicProvider,
    MalformedProviderOutput,
    ProviderTransportError,
    parse_predictions,
)
from core.config import get_settings
from core.utils.text import strip_term


def _signal(signal_id, firm="Kelly Services", description=""):
    return SimpleNamespace(
        id=signal_id,
        signal_detail={
            "job_title": "Clinical Research Associate II",
            "job_location": "Cambridge, MA",
            "job_description": description or f"{firm} is hiring a CRA for a top oncology sponsor.",
            "competitor_firm": firm,
        },
    )


def _answer(ids):
    return json.dumps(
        [
            {
                "id": signal_id,
                "predictions": [
                    {"company": "Vertex Pharmaceuticals", "confidence": "High", "reasoning": "CF focus"},
                    {"company": "Moderna", "confidence": "Medium", "reasoning": "Cambridge site"},
                    {"company": "Biogen", "confidence": "Low", "reasoning": "Neuro pipeline"},
                ],
            }
            for signal_id in ids
        ]
    )


class FakeProvider:
    def __init__(self, responses=None):
        self.prompts = []
        self.responses = responses or {}

    def complete(self, prompt):
        self.prompts.append(prompt)
        response = self.responses.get(len(self.prompts))
        if isinstance(response, Exception):
            raise response
        if response is not None:
            return response
        ids = [line.split("ID: ", 1)[1] for line in prompt.splitlines() if line.startswith(tuple("0123456789")) and "ID: " in line]
        return _answer(ids)


@pytest.mark.parametrize("count", [1, 10, 11, 25])
def test_one_provider_call_per_batch(count):
    provider = FakeProvider()
    agent = ClientInferenceAgent(provider=provider, config=InferenceConfig(batch_size=10))
    result = agent.infer([_signal(f"s{i}") for i in range(count)])
    assert len(provider.prompts) == math.ceil(count / 10)
    assert len(result) == count
    assert [p.confidence for p in result["s0"]] == ["High", "Medium", "Low"]


def test_malformed_batch_is_skipped():
    provider = FakeProvider(responses={2: "Sorry, I can't help with that."})
    agent = ClientInferenceAgent(provider=provider, config=InferenceConfig(batch_size=2))
    result = agent.infer([_signal(f"s{i}") for i in range(5)])
    assert len(provider.prompts) == 3
    assert set(result) == {"s0", "s1", "s4"}


def test_transport_failure_is_skipped():
    provider = FakeProvider(responses={1: ProviderTransportError("timed out")})
    agent = ClientInferenceAgent(provider=provider, config=InferenceConfig(batch_size=1))
    result = agent.infer([_signal("a"), _signal("b")])
    assert set(result) == {"b"}


def test_unexpected_error_never_escapes():
    provider = FakeProvider(responses={1: RuntimeError("boom")})
    agent = ClientInferenceAgent(provider=provider, config=InferenceConfig(batch_size=10))
    assert agent.infer([_signal("a")]) == {}


def test_items_without_predictions_or_unknown_ids_are_dropped():
    body = json.dumps(
        [
            {"id": "a", "predictions": []},
            {"id": "zzz", "predictions": [{"company": "Pfizer", "confidence": "High", "reasoning": ""}]},
            {"id": "b", "predictions": [{"company": "Pfizer", "confidence": "high", "reasoning": "x"}]},
        ]
    )
    provider = FakeProvider(responses={1: body})
    result = ClientInferenceAgent(provider=provider).infer([_signal("a"), _signal("b")])
    assert list(result) == ["b"]
    assert result["b"][0].confidence == "High"


def test_bad_predictions_are_dropped_without_losing_the_signal():
    body = json.dumps(
        [
            {
                "id": "a",
                "predictions": [
                    {"company": "Vertex Pharmaceuticals", "confidence": "High", "reasoning": "CF focus"},
                    {"company": "Moderna", "confidence": "Medium-High", "reasoning": "Cambridge site"},
                    {"company": "Biogen", "confidence": "Low", "reasoning": None},
                ],
            },
            {"id": "b", "predictions": [{"company": "Pfizer", "confidence": "Certain"}]},
        ]
    )
    provider = FakeProvider(responses={1: body})
    result = ClientInferenceAgent(provider=provider).infer([_signal("a"), _signal("b")])
    assert list(result) == ["a"]
    assert [(p.company, p.confidence) for p in result["a"]] == [
        ("Vertex Pharmaceuticals", "High"),
        ("Biogen", "Low"),
    ]
    assert result["a"][1].reasoning == ""


def test_missing_credential_disables_inference(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    get_settings.cache_clear()
    try:
        assert ClientInferenceAgent().infer([_signal("a")]) == {}
    finally:
        get_settings.cache_clear()


def test_prompt_never_mentions_the_staffing_firm():
    signal = _signal("a", description="KELLY SERVICES seeks a CRA. Apply via Kelly Services today.")
    prompt = build_prompt([InferenceInput.from_signal(signal)])
    assert "kelly services" not in prompt.lower()
    assert "ID: a" in prompt
    assert "top 3" in prompt


def test_strip_term_escapes_metacharacters():
    assert strip_term("Sci.bio and Scixbio hiring", "Sci.bio") == "and Scixbio hiring"
    assert strip_term("  spaced   out ", None) == "spaced out"


def test_parse_predictions_tolerates_commentary():
    text = "Here are my guesses:\n```json\n" + _answer(["s1"]) + "\n```\nHope this helps."
    parsed = parse_predictions(text)
    assert parsed[0].id == "s1"
    assert parsed[0].predictions[0].company == "Vertex Pharmaceuticals"


def test_parse_predictions_rejects_text_without_array():
    with pytest.raises(MalformedProviderOutput):
        parse_predictions("no json here")
    with pytest.raises(MalformedProviderOutput):
        parse_predictions("[not, valid json]")


def test_anthropic_provider_reads_text_blocks():
    seen = {}

    def handler(request):
        seen["key"] = request.headers["x-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"content": [{"type": "text", "text": _answer(["s1"])}]})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    provider = AnthropicProvider(api_key="test-key", model="test-model", client=client)
    text = provider.complete("hello")
    assert parse_predictions(text)[0].id == "s1"
    assert seen["key"] == "test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["messages"][0]["content"] == "hello"


def test_anthropic_provider_error_kinds():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(529, text="overloaded")))
    with pytest.raises(ProviderTransportError):
        AnthropicProvider(api_key="k", client=client).complete("hi")

    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"content": []})))
    with pytest.raises(MalformedProviderOutput):
        AnthropicProvider(api_key="k", client=client).complete("hi")

    def broken(request):
        raise httpx.ConnectError("refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(broken))
    with pytest.raises(ProviderTransportError):
        AnthropicProvider(api_key="k", client=client).complete("hi")


def test_provider_closes_only_the_client_it_created():
    provider = AnthropicProvider(api_key="k")
    provider.close()
    assert provider.client.is_closed

    injected = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    with AnthropicProvider(api_key="k", client=injected):
        pass
    assert not injected.is_closed
    injected.close()


def test_agent_close_tolerates_providers_without_close():
    ClientInferenceAgent(provider=FakeProvider()).close()
