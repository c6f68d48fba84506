"""Quick-prompt enhancement — provider selection, cleanup and fallbacks."""

from app.core.errors import GeminiAPIError
from app.core.prompt_enhancement import ERROR_FALLBACK_SUFFIX, FALLBACK_SUFFIX
from tests.services.mock_clients import MockAnthropicClient, MockGeminiClient


async def test_unconfigured_provider_uses_fallback(client):
    response = await client.post("/api/quick-prompt/enhance", json={"prompt": "a fox"})
    body = response.json()
    assert body["enhanced_prompt"] == "a fox" + FALLBACK_SUFFIX
    assert body["provider_used"] == "fallback"
    assert body["diagnostics"]["fallback_used"] is True


async def test_anthropic_response_cleaned(client, provider_overrides):
    anthropic = MockAnthropicClient('"Enhanced prompt: a **majestic** fox at dawn"')
    provider_overrides["anthropic"] = anthropic

    response = await client.post(
        "/api/quick-prompt/enhance",
        json={
            "prompt": "a fox",
            "provider": "anthropic",
            "character": {"name": "Mara", "description": "a desert pilot"},
        },
    )
    body = response.json()
    assert body["enhanced_prompt"] == "a majestic fox at dawn"
    assert body["provider_used"] == "anthropic"
    assert body["diagnostics"]["original_length"] == 5
    assert body["diagnostics"]["final_length"] == len("a majestic fox at dawn")
    assert anthropic.requests[0]["prompt"] == "a fox"
    assert '"Mara"' in anthropic.requests[0]["system"]


async def test_gemini_failure_degrades_gracefully(client, provider_overrides):
    gemini = MockGeminiClient()
    gemini.fail_with = GeminiAPIError("quota exhausted", "rate_limit")
    provider_overrides["gemini"] = gemini

    response = await client.post("/api/quick-prompt/enhance", json={"prompt": "a fox"})
    assert response.status_code == 200
    body = response.json()
    assert body["enhanced_prompt"] == "a fox" + ERROR_FALLBACK_SUFFIX
    assert body["provider_used"] == "fallback"
    assert "quota exhausted" in body["diagnostics"]["error"]


async def test_empty_provider_answer_degrades(client, provider_overrides):
    provider_overrides["gemini"] = MockGeminiClient(text='""')
    body = (await client.post("/api/quick-prompt/enhance", json={"prompt": "a fox"})).json()
    assert body["enhanced_prompt"] == "a fox" + ERROR_FALLBACK_SUFFIX


async def test_provider_failure_skips_happy_talk_and_compression(client, provider_overrides):
    gemini = MockGeminiClient()
    gemini.fail_with = GeminiAPIError("quota exhausted", "rate_limit")
    provider_overrides["gemini"] = gemini

    body = (await client.post(
        "/api/quick-prompt/enhance",
        json={"prompt": "a fox", "happy_talk": True, "compression": "heavy"},
    )).json()
    assert body["enhanced_prompt"] == "a fox" + ERROR_FALLBACK_SUFFIX
    assert body["diagnostics"]["happy_talk_applied"] is False


async def test_happy_talk_and_compression_applied(client, provider_overrides):
    provider_overrides["gemini"] = MockGeminiClient(text="cinematic " + "filler " * 100)
    body = (await client.post(
        "/api/quick-prompt/enhance",
        json={"prompt": "a fox", "happy_talk": True, "compression": "heavy"},
    )).json()
    assert body["diagnostics"]["happy_talk_applied"] is True
    assert body["diagnostics"]["compression"] == "heavy"
    assert body["diagnostics"]["final_length"] == len(body["enhanced_prompt"])


async def test_unknown_compression_rejected(client):
    response = await client.post(
        "/api/quick-prompt/enhance", json={"prompt": "a fox", "compression": "extreme"},
    )
    assert response.status_code == 400
