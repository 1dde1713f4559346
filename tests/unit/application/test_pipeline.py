# tests/unit/application/test_pipeline.py
"""测试单个任务的翻译流水线（缓存以 AsyncMock 替代）。"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from jsonlingo.application.batch_translator import BatchTranslator
from jsonlingo.application.length_enforcer import LengthEnforcer
from jsonlingo.application.pipeline import TranslationPipeline
from jsonlingo.domain.tree import StringNode
from jsonlingo_core.types import (
    CacheEntry,
    JobStatus,
    PipelineFailure,
    PipelineSuccess,
    TranslationJob,
)
from tests.helpers.factories import CALLBACK_URL
from tests.helpers.fakes import FakeEngineConfig, FakeTranslationEngine

LONG_PARAGRAPH = (
    "The first sentence of this paragraph is reasonably long. "
    "The second sentence is also quite long indeed."
)


def make_job(input_json: Any, **overrides: Any) -> TranslationJob:
    data: dict[str, Any] = {
        "id": "job-1",
        "status": JobStatus.PENDING,
        "target_lang": "de",
        "callback_url": CALLBACK_URL,
        "input_json": input_json,
    }
    data.update(overrides)
    return TranslationJob(**data)


class Harness:
    def __init__(self, cached: dict[str, str] | None = None, **engine_config: Any):
        self.engine = FakeTranslationEngine(FakeEngineConfig(**engine_config))
        self.saved: list[CacheEntry] = []

        async def _save(entries):
            self.saved.extend(entries)

        self.cache = MagicMock()
        self.cache.lookup = AsyncMock(return_value=dict(cached or {}))
        self.cache.save = AsyncMock(side_effect=_save)
        self.pipeline = TranslationPipeline(
            self.cache, BatchTranslator(self.engine), LengthEnforcer()
        )


@pytest.mark.asyncio
async def test_translates_strings_and_preserves_structure():
    h = Harness()
    job = make_job({"title": "Hello", "body": "<p>World</p>", "count": 3, "ok": None})

    result = await h.pipeline.run(job)

    assert isinstance(result, PipelineSuccess)
    assert result.output_json == {
        "title": "[de] Hello",
        "body": "<p>[de] World</p>",
        "count": 3,
        "ok": None,
    }
    assert result.total_segments == 2
    assert result.cache_hits == 0
    assert [e.source_text for e in h.saved] == ["Hello", "World"]
    assert all(e.source_lang == "auto" and e.target_lang == "de" for e in h.saved)


@pytest.mark.asyncio
async def test_duplicate_segments_are_translated_once():
    h = Harness()
    result = await h.pipeline.run(make_job({"a": "Hi", "b": ["Hi", "<p>Hi</p>"]}))

    assert h.engine.translated_texts == ["Hi"]
    assert result.output_json == {"a": "[de] Hi", "b": ["[de] Hi", "<p>[de] Hi</p>"]}
    assert result.total_segments == 1


@pytest.mark.asyncio
async def test_cached_segments_skip_the_engine():
    h = Harness(cached={"Hello": "Hallo"})
    result = await h.pipeline.run(make_job({"a": "Hello", "b": "Bye"}, source_lang="en"))

    assert h.engine.translated_texts == ["Bye"]
    assert result.output_json == {"a": "Hallo", "b": "[de] Bye"}
    assert result.cache_hits == 1
    h.cache.lookup.assert_awaited_once_with(["Hello", "Bye"], "en", "de")
    assert [(e.source_text, e.source_lang) for e in h.saved] == [("Bye", "en")]


@pytest.mark.asyncio
async def test_fully_cached_job_does_not_call_engine_or_save():
    h = Harness(cached={"Hello": "Hallo"})
    result = await h.pipeline.run(make_job(["Hello"]))

    assert result.output_json == ["Hallo"]
    assert h.engine.calls == []
    h.cache.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_long_fragments_are_split_into_sentences():
    h = Harness()
    result = await h.pipeline.run(make_job({"text": f"<p>{LONG_PARAGRAPH}</p>"}))

    assert h.engine.translated_texts == [
        "The first sentence of this paragraph is reasonably long.",
        "The second sentence is also quite long indeed.",
    ]
    assert result.output_json["text"] == (
        "<p>[de] The first sentence of this paragraph is reasonably long. "
        "[de] The second sentence is also quite long indeed.</p>"
    )


@pytest.mark.asyncio
async def test_split_fragment_keeps_its_edge_whitespace():
    h = Harness()
    result = await h.pipeline.run(
        make_job({"text": f"<div>\n   {LONG_PARAGRAPH} \n</div>"})
    )

    assert len(h.engine.translated_texts) == 2
    assert result.output_json["text"] == (
        "<div>\n   [de] The first sentence of this paragraph is reasonably long. "
        "[de] The second sentence is also quite long indeed. \n</div>"
    )


@pytest.mark.asyncio
async def test_document_without_strings_succeeds_with_zero_segments():
    h = Harness()
    result = await h.pipeline.run(make_job({"n": 1, "list": [True, None]}))

    assert isinstance(result, PipelineSuccess)
    assert result.output_json == {"n": 1, "list": [True, None]}
    assert result.total_segments == 0
    h.cache.lookup.assert_awaited_once()


@pytest.mark.asyncio
async def test_length_constraints_are_applied_after_translation():
    h = Harness()
    result = await h.pipeline.run(
        make_job({"title": "A rather long headline"}, constraints={"title": 10})
    )
    assert result.output_json == {"title": "[de] A rat"}


@pytest.mark.asyncio
@pytest.mark.parametrize("retryable", [True, False])
async def test_engine_failure_becomes_pipeline_failure(retryable):
    h = Harness(mode="fail", fail_is_retryable=retryable)
    result = await h.pipeline.run(make_job({"a": "Hello"}))

    assert isinstance(result, PipelineFailure)
    assert result.is_retryable is retryable
    assert result.error_type == "TranslationProviderError"
    h.cache.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_invariant_violation_is_fatal():
    h = Harness()
    enforcer = MagicMock()
    enforcer.enforce = AsyncMock(return_value=[StringNode(path=("gone",), value="x")])
    pipeline = TranslationPipeline(h.cache, BatchTranslator(h.engine), enforcer)

    result = await pipeline.run(make_job({"a": "Hello"}))

    assert isinstance(result, PipelineFailure)
    assert result.is_retryable is False
    assert result.error_type == "PathResolutionError"


@pytest.mark.asyncio
async def test_unexpected_error_is_retryable():
    h = Harness()
    h.cache.lookup.side_effect = RuntimeError("database went away")

    result = await h.pipeline.run(make_job({"a": "Hello"}))

    assert isinstance(result, PipelineFailure)
    assert result.is_retryable is True
    assert "database went away" in result.error_message


def test_plan_exposes_templates_and_segments():
    h = Harness()
    plans = h.pipeline.plan({"a": "<div><p>One</p><p>Two</p></div>"})

    assert len(plans) == 1
    assert plans[0].html_map.template == "<div><p>[0]</p><p>[1]</p></div>"
    assert plans[0].segments_per_fragment == [["One"], ["Two"]]


@pytest.mark.asyncio
async def test_debug_engine_scenario():
    from jsonlingo.adapters.engines.debug import DebugEngine
    from jsonlingo.config import DebugEngineSettings

    h = Harness()
    pipeline = TranslationPipeline(
        h.cache, BatchTranslator(DebugEngine(DebugEngineSettings())), LengthEnforcer()
    )
    job = make_job(
        {"title": "Hello World", "items": [{"name": "Item 1"}]}, target_lang="fr"
    )

    result = await pipeline.run(job)

    assert result.output_json == {
        "title": "Hello World (fr)",
        "items": [{"name": "Item 1 (fr)"}],
    }


@pytest.mark.asyncio
async def test_long_leaf_is_cut_to_exactly_max_length():
    h = Harness()
    result = await h.pipeline.run(make_job({"d": "y" * 200}, constraints={"d": 50}))
    assert len(result.output_json["d"]) == 50
