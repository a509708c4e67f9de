"""歌词管理器 - 协调歌词获取的生命周期、取消和缓存"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from islandlyrics.core.context import LyricsContext
from islandlyrics.core.interfaces import LyricResult, SongQuery
from .result_selector import LyricsResultSelector


@dataclass(frozen=True)
class LyricsFetchOutcome:
    """一次获取的结果"""
    query: SongQuery
    result: Optional[LyricResult]
    is_stale: bool = False


class LyricsManager:
    """
    歌词管理器

    每次获取都带有歌曲标签：新歌曲会取消旧的获取任务，
    已完成但歌曲已变化的结果会被丢弃。包含缓存机制以避免重复请求。
    """

    def __init__(self, context: LyricsContext, selector: Optional[LyricsResultSelector] = None):
        """
        初始化歌词管理器

        Args:
            context: 引擎上下文
            selector: 结果选择器，默认使用上下文中的提供者创建
        """
        self.logger = logging.getLogger("islandlyrics.lyrics.lyrics_manager")
        self.context = context
        self.selector = selector or LyricsResultSelector(
            context.providers,
            batch_deadline=context.config.get_batch_deadline()
        )

        self._current_query: Optional[SongQuery] = None
        self._fetch_task: Optional[asyncio.Task] = None

        # 歌词缓存 - 使用歌曲标签作为键，只缓存找到的歌词
        self._lyrics_cache: Dict[str, LyricResult] = {}
        self.cache_enabled = context.config.is_cache_enabled()
        self.max_cache_size = context.config.get_max_cache_size()

        self.logger.info("歌词管理器初始化完成")

    @property
    def current_query(self) -> Optional[SongQuery]:
        return self._current_query

    def is_current(self, query: SongQuery) -> bool:
        """检查查询是否仍对应当前歌曲"""
        return self._current_query is not None and self._current_query.song_id == query.song_id

    async def fetch_lyrics(self, query: SongQuery) -> Optional[LyricResult]:
        """
        获取歌曲的最佳歌词

        Args:
            query: 歌曲元数据

        Returns:
            最佳LyricResult，未找到歌词时返回None
        """
        cache_key = self._create_cache_key(query)
        if self.cache_enabled and cache_key in self._lyrics_cache:
            self.logger.debug(f"从缓存返回歌词: {query.title}")
            return self._lyrics_cache[cache_key]

        self.logger.info(f"获取歌词: {query.title} - {query.artist}")
        result = await self.selector.fetch_best(query.title, query.artist, query.duration_hint)

        # 无结果可能来自临时的网络故障，不缓存
        if self.cache_enabled and result is not None:
            self._cache_lyrics(cache_key, result)
        return result

    def request_lyrics(self, query: SongQuery) -> "asyncio.Task[LyricsFetchOutcome]":
        """
        为新歌曲启动获取任务，并取消仍在进行的旧任务

        必须在事件循环中调用。

        Returns:
            获取任务，结果为 LyricsFetchOutcome
        """
        self._cancel_pending_fetch()
        self._current_query = query
        self._fetch_task = asyncio.create_task(self._run_fetch(query), name=f"fetch-{query.song_id}")
        return self._fetch_task

    def on_metadata_changed(self, query: SongQuery) -> bool:
        """
        处理外部元数据变化

        Returns:
            如果歌曲发生变化（旧任务被取消）则返回True
        """
        if self.is_current(query):
            return False

        self.logger.info(f"歌曲已变化: {query.title} - {query.artist}")
        self._cancel_pending_fetch()
        self._current_query = query
        return True

    async def _run_fetch(self, query: SongQuery) -> LyricsFetchOutcome:
        try:
            result = await self.fetch_lyrics(query)
        except asyncio.CancelledError:
            self.logger.debug(f"歌词获取已取消（歌曲已变化）: {query.title}")
            raise

        # 一致性检查：确保仍在播放同一首歌
        if not self.is_current(query):
            current_title = self._current_query.title if self._current_query else None
            self.logger.info(f"丢弃过期的歌词结果，期望: {query.title}，当前: {current_title}")
            return LyricsFetchOutcome(query=query, result=None, is_stale=True)

        if result is None:
            self.logger.info(f"在线歌词获取失败：无有效结果 ({query.title})")
        return LyricsFetchOutcome(query=query, result=result)

    def _cancel_pending_fetch(self) -> None:
        if self._fetch_task is not None and not self._fetch_task.done():
            self.logger.debug("取消进行中的歌词获取")
            self._fetch_task.cancel()
        self._fetch_task = None

    def _create_cache_key(self, query: SongQuery) -> str:
        """
        创建缓存键

        Args:
            query: 歌曲元数据

        Returns:
            规范化的缓存键
        """
        normalized_title = query.title.strip().lower()
        normalized_artist = query.artist.strip().lower() if query.artist else ""
        return f"{normalized_title}|{normalized_artist}"

    def _cache_lyrics(self, cache_key: str, result: LyricResult) -> None:
        """缓存结果，超过上限时移除最旧的条目"""
        if self.max_cache_size < 1:
            return
        if cache_key not in self._lyrics_cache and len(self._lyrics_cache) >= self.max_cache_size:
            oldest_key = next(iter(self._lyrics_cache))
            del self._lyrics_cache[oldest_key]
            self.logger.debug(f"从缓存中移除最旧条目: {oldest_key}")

        self._lyrics_cache[cache_key] = result

    def clear_cache(self) -> None:
        """清除歌词缓存"""
        self._lyrics_cache.clear()
        self.logger.info("歌词缓存已清除")

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        获取缓存统计信息

        Returns:
            缓存统计字典
        """
        return {
            'cache_size': len(self._lyrics_cache),
            'max_cache_size': self.max_cache_size,
            'cache_enabled': self.cache_enabled,
        }
