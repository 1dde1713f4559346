# src/jsonlingo/application/pipeline.py
"""
单个翻译任务的完整执行流程。

JSON 树 → 字符串叶子 → 模板与片段 → 句段 → 缓存查询 → 批量翻译（仅未命中）
→ 缓存回写 → 片段与叶子还原 → 长度约束 → 重建 JSON。

`run` 从不抛出异常，而是返回 `PipelineSuccess` 或带有可重试标记的 `PipelineFailure`，
由调度器决定重试还是进入终态。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from jsonlingo.domain import markup
from jsonlingo.domain.fingerprint import normalize_source_lang
from jsonlingo.domain.segmenter import DEFAULT_MIN_LENGTH, join_segments, split_sentences
from jsonlingo.domain.tree import StringNode, extract_strings, reconstruct
from jsonlingo_core.exceptions import InvariantViolationError, TranslationProviderError
from jsonlingo_core.types import (
    CacheEntry,
    PipelineFailure,
    PipelineResult,
    PipelineSuccess,
    TranslationJob,
)

if TYPE_CHECKING:
    from .batch_translator import BatchTranslator
    from .length_enforcer import LengthEnforcer
    from .translation_cache import TranslationCache

logger = structlog.get_logger(__name__)


def _keep_edge_whitespace(source: str, translated: str) -> str:
    """句段会被去除首尾空白，还原时把原片段的首尾空白放回译文两侧。"""
    core = source.strip()
    if not core:
        return translated
    start = source.index(core)
    return source[:start] + translated.strip() + source[start + len(core):]


@dataclass
class _LeafPlan:
    """一个叶子节点的拆分结果：模板，以及每个片段对应的句段列表。"""

    node: StringNode
    html_map: markup.HtmlMap
    segments_per_fragment: list[list[str]]


class TranslationPipeline:
    def __init__(
        self,
        cache: "TranslationCache",
        translator: "BatchTranslator",
        enforcer: "LengthEnforcer",
        *,
        classifier: markup.MarkupClassifier = markup.DEFAULT_CLASSIFIER,
        segment_min_length: int = DEFAULT_MIN_LENGTH,
    ):
        self._cache = cache
        self._translator = translator
        self._enforcer = enforcer
        self._classifier = classifier
        self._segment_min_length = segment_min_length

    async def run(self, job: TranslationJob) -> PipelineResult:
        try:
            return await self._execute(job)
        except InvariantViolationError as e:
            logger.error(
                "任务执行违反了程序不变量，任务将直接失败",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return PipelineFailure(
                error_message=str(e), is_retryable=False, error_type=type(e).__name__
            )
        except TranslationProviderError as e:
            logger.warning(
                "翻译服务调用失败", error=str(e), is_retryable=e.is_retryable
            )
            return PipelineFailure(
                error_message=str(e),
                is_retryable=e.is_retryable,
                error_type=type(e).__name__,
            )
        except Exception as e:
            logger.error("任务执行时发生未知错误", error=str(e), exc_info=True)
            return PipelineFailure(
                error_message=f"{type(e).__name__}: {e}",
                is_retryable=True,
                error_type=type(e).__name__,
            )

    def plan(self, value: object) -> list[_LeafPlan]:
        """把 JSON 值拆分为叶子、模板、片段与句段。"""
        plans = []
        for node in extract_strings(value):
            html_map = markup.extract(node.value, self._classifier)
            plans.append(
                _LeafPlan(
                    node=node,
                    html_map=html_map,
                    segments_per_fragment=[
                        split_sentences(fragment, self._segment_min_length)
                        for fragment in html_map.fragments
                    ],
                )
            )
        return plans

    async def _execute(self, job: TranslationJob) -> PipelineSuccess:
        plans = self.plan(job.input_json)

        # 整个任务内去重，保持首次出现的顺序
        distinct = list(
            dict.fromkeys(
                segment
                for plan in plans
                for segments in plan.segments_per_fragment
                for segment in segments
            )
        )

        cached = await self._cache.lookup(distinct, job.source_lang, job.target_lang)
        misses = [segment for segment in distinct if segment not in cached]

        translations = dict(cached)
        if misses:
            translated = await self._translator.translate(
                misses, job.source_lang, job.target_lang, job.glossary_id
            )
            translations.update(zip(misses, translated))
            source_lang = normalize_source_lang(job.source_lang)
            await self._cache.save(
                CacheEntry(
                    source_text=source,
                    source_lang=source_lang,
                    target_lang=job.target_lang,
                    translated_text=target,
                )
                for source, target in zip(misses, translated)
            )

        nodes = [
            StringNode(
                path=plan.node.path,
                value=plan.html_map.restore_with(
                    [
                        _keep_edge_whitespace(
                            fragment,
                            join_segments([translations[s] for s in segments]),
                        )
                        for fragment, segments in zip(
                            plan.html_map.fragments, plan.segments_per_fragment
                        )
                    ]
                ),
            )
            for plan in plans
        ]
        nodes = await self._enforcer.enforce(nodes, job.constraints, job.target_lang)

        logger.info(
            "任务翻译完成",
            leaves=len(plans),
            total_segments=len(distinct),
            cache_hits=len(cached),
            translated=len(misses),
        )
        return PipelineSuccess(
            output_json=reconstruct(job.input_json, nodes),
            total_segments=len(distinct),
            cache_hits=len(cached),
        )
