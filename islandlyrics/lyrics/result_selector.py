"""
歌词结果选择器 - 并发请求所有提供者并选择最佳结果

- 所有提供者并发执行，整批共享一个截止时间
- 截止时间到达后只收集已完成的结果，其余任务取消并放弃
- 没有可用结果时，用清理后的标题重试一次
- 对每个结果独立评分，选择分数最高者（同分优先逐字歌词）
"""

import asyncio
import dataclasses
import logging
from typing import Iterable, List, Optional, Sequence

from islandlyrics.core.interfaces import ILyricProvider, LyricResult
from islandlyrics.lyrics.lyrics_parser import has_timestamp_tags
from islandlyrics.utils.text_utils import clean_title, declares_no_lyrics

DEFAULT_BATCH_DEADLINE = 10.0

SYLLABLE_BONUS = 30
TIMESTAMP_BONUS = 20
EXACT_TITLE_BONUS = 50
CLEAN_TITLE_BONUS = 20
TITLE_MISMATCH_PENALTY = -50
NO_TITLE_PENALTY = -10
INSTRUMENTAL_PENALTY = -100

# LrcApi 无法返回匹配标题，用信任分补偿
LRCAPI_TRUST_BONUS = 55


def provider_bias(result: LyricResult) -> int:
    """提供者的质量与信任分"""
    if result.provider_id == "Kugou":
        return 10 if result.has_syllable_timing else 5
    if result.provider_id == "LrcApi":
        return LRCAPI_TRUST_BONUS
    if result.provider_id == "Netease":
        return 5
    return 0


def title_match_score(matched_title: Optional[str], target_title: str) -> int:
    """
    标题匹配得分

    原标题完全匹配 +50，清理后匹配 +20，否则 -50；没有标题信息 -10。
    """
    if not matched_title:
        return NO_TITLE_PENALTY

    if matched_title.lower() == target_title.lower():
        return EXACT_TITLE_BONUS

    if clean_title(matched_title).lower() == clean_title(target_title).lower():
        return CLEAN_TITLE_BONUS

    return TITLE_MISMATCH_PENALTY


def score_result(result: LyricResult, target_title: str) -> int:
    """
    计算单个结果的分数（各结果独立计算，互不比较）

    Args:
        result: 提供者结果
        target_title: 查询标题

    Returns:
        分数
    """
    score = 0

    if result.has_syllable_timing:
        score += SYLLABLE_BONUS

    # 逐字歌词必然包含时间轴
    if result.has_syllable_timing or has_timestamp_tags(result.raw_text):
        score += TIMESTAMP_BONUS

    score += provider_bias(result)
    score += title_match_score(result.matched_title, target_title)

    if result.is_instrumental or declares_no_lyrics(result.raw_text or ""):
        score += INSTRUMENTAL_PENALTY

    return score


def select_best(results: Iterable[LyricResult], target_title: str) -> Optional[LyricResult]:
    """
    评分并选择最佳结果

    Args:
        results: 已完成的提供者结果
        target_title: 查询标题

    Returns:
        分数最高的可用结果，没有可用结果时返回None
    """
    scored = [
        dataclasses.replace(result, score=score_result(result, target_title))
        for result in results
        if result.is_usable
    ]
    if not scored:
        return None
    return max(scored, key=lambda result: (result.score, result.has_syllable_timing))


class LyricsResultSelector:
    """
    歌词结果选择器

    并发请求所有提供者，在截止时间内收集结果并选择最佳歌词。
    """

    def __init__(self, providers: Sequence[ILyricProvider], batch_deadline: float = DEFAULT_BATCH_DEADLINE):
        """
        初始化结果选择器

        Args:
            providers: 参与竞速的提供者
            batch_deadline: 整批请求的截止时间（秒）
        """
        self.logger = logging.getLogger("islandlyrics.lyrics.result_selector")
        self.providers = list(providers)
        self.batch_deadline = batch_deadline

    async def fetch_best(self, title: str, artist: str, duration_hint: Optional[int] = None) -> Optional[LyricResult]:
        """
        从所有提供者获取歌词并选择最佳结果

        Args:
            title: 歌曲标题
            artist: 艺术家
            duration_hint: 歌曲时长（毫秒，可选）

        Returns:
            最佳结果，所有提供者都失败时返回None
        """
        best = select_best(await self.race(title, artist, duration_hint), title)
        if best is not None:
            self._log_selection(best)
            return best

        cleaned = clean_title(title)
        if cleaned and cleaned != title:
            self.logger.info(f"精确搜索未找到，尝试清理标题: {cleaned}")
            best = select_best(await self.race(cleaned, artist, duration_hint), cleaned)
            if best is not None:
                self._log_selection(best)
                return best

        self.logger.info(f"所有歌词源均未返回可用结果: {title} - {artist}")
        return None

    async def race(self, title: str, artist: str, duration_hint: Optional[int] = None) -> List[LyricResult]:
        """
        并发请求所有提供者，返回截止时间内完成的结果

        超时未完成的任务被取消且不再等待；本协程被取消时同样取消所有子任务。
        """
        if not self.providers:
            return []

        tasks = [
            asyncio.create_task(provider.fetch(title, artist, duration_hint), name=f"lyrics-{provider.name}")
            for provider in self.providers
        ]

        try:
            done, pending = await asyncio.wait(tasks, timeout=self.batch_deadline)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if pending:
            self.logger.info(
                f"部分请求超时，已放弃: {', '.join(task.get_name() for task in pending)}"
            )

        results = []
        for task in tasks:
            if task not in done or task.cancelled():
                continue
            error = task.exception()
            if error is not None:
                self.logger.warning(f"歌词任务 {task.get_name()} 异常: {error}")
                continue
            results.append(task.result())

        return results

    def _log_selection(self, best: LyricResult) -> None:
        self.logger.info(
            f"选择歌词: {best.get_display_name()} "
            f"(分数: {best.score}, 逐字: {best.has_syllable_timing})"
        )
