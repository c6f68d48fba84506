"""Prompt Extraction — tests for model-output parsing and prompt mapping.

Tests cover:
    - URL detection and data-URL stripping
    - clean_json for fenced and prose-wrapped arrays
    - coerce_prompt_list shapes
    - parse_model_output: JSON, the link prose fallback, unusable output
    - map_extracted_prompt defaults
"""

from app.core.prompt_extraction import (
    LINK_FALLBACK_MAX_CHARS,
    build_instruction,
    clean_json,
    coerce_prompt_list,
    is_url,
    map_extracted_prompt,
    parse_model_output,
    strip_data_url,
)


def test_is_url():
    assert is_url("https://civitai.com/images/1")
    assert is_url("http://example.com")
    assert not is_url("ftp://example.com")
    assert not is_url(None)


def test_strip_data_url():
    assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
    assert strip_data_url("AAAA") == "AAAA"


def test_build_instruction_variants():
    assert "Google Search" in build_instruction(url_source=True)
    assert "return an empty array" in build_instruction(url_source=False)


def test_clean_json_extracts_array_from_prose():
    text = 'Here you go:\n```json\n[{"title": "a"}]\n```\nEnjoy!'
    assert clean_json(text) == '[{"title": "a"}]'


def test_clean_json_strips_fences_around_object():
    assert clean_json('```json\n{"title": "a"}\n```') == '{"title": "a"}'


def test_coerce_prompt_list():
    assert coerce_prompt_list([{"a": 1}, "x", 3]) == [{"a": 1}]
    assert coerce_prompt_list({"a": 1}) == [{"a": 1}]
    assert coerce_prompt_list("nope") == []


def test_parse_model_output_json_array():
    items = parse_model_output('[{"title": "Fox", "content": "a fox"}]', url_source=False)
    assert items == [{"title": "Fox", "content": "a fox"}]


def test_parse_model_output_empty_is_empty_list():
    assert parse_model_output("", url_source=False) == []


def test_parse_model_output_link_prose_fallback():
    prose = "The post describes a misty forest at dawn. " * 20
    items = parse_model_output(prose, url_source=True)
    assert len(items) == 1
    assert items[0]["title"] == "Extracted from Link"
    assert items[0]["tags"] == ["link-content"]
    assert len(items[0]["content"]) == LINK_FALLBACK_MAX_CHARS


def test_parse_model_output_unusable_text():
    assert parse_model_output("sorry, I cannot help", url_source=False) is None


def test_parse_model_output_short_link_prose_is_unusable():
    assert parse_model_output("nothing here", url_source=True) is None


def test_map_extracted_prompt_defaults():
    prompt = map_extracted_prompt({"content": "a fox", "tags": ["fox", 1]}, "fox.png")
    assert prompt["title"] == "Prompt from fox.png"
    assert prompt["tags"] == ["fox", "1"]
    assert prompt["model"] == "Unknown"
    assert prompt["negative_prompt"] is None
    assert prompt["source"] == "fox.png"
    assert prompt["images"] == []
    assert len(prompt["id"]) == 36


def test_map_extracted_prompt_full_item():
    raw = {
        "title": "Fox", "content": "a fox", "negativePrompt": "blurry",
        "tags": ["fox"], "suggestedModel": "Midjourney", "imageParams": "--ar 3:2",
    }
    prompt = map_extracted_prompt(raw, "post", original_source_image="data:image/png;base64,AA")
    assert prompt["negative_prompt"] == "blurry"
    assert prompt["model"] == "Midjourney"
    assert prompt["image_params"] == "--ar 3:2"
    assert prompt["original_source_image"] == "data:image/png;base64,AA"
