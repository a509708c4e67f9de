"""
歌词提供者基类 - 定义歌词提供者的通用功能

提供统一的错误边界和日志记录：任何失败都转换为带 error 的 LyricResult。
"""

import asyncio
import logging
from abc import ABC
from typing import List, Optional

from islandlyrics.core.interfaces import (
    ILyricProvider,
    LyricLine,
    LyricResult,
    LyricsError,
)
from islandlyrics.utils.http_client import LyricHttpClient


class BaseLyricProvider(ILyricProvider, ABC):
    """
    歌词提供者基类

    子类实现 _fetch_impl，只需在失败时抛出 LyricsError 或返回错误结果。
    """

    def __init__(self, name: str, http_client: Optional[LyricHttpClient] = None):
        """
        初始化歌词提供者

        Args:
            name: 提供者名称
            http_client: 共享的HTTP客户端
        """
        self.name = name
        self.http = http_client or LyricHttpClient()
        self.logger = logging.getLogger(f"islandlyrics.provider.{name.lower()}")

        self.logger.debug(f"{name} 歌词提供者初始化完成")

    def _error_result(
        self,
        error: str,
        matched_title: Optional[str] = None,
        matched_artist: Optional[str] = None
    ) -> LyricResult:
        """创建错误结果，保留已匹配的元数据"""
        return LyricResult(
            provider_id=self.name,
            matched_title=matched_title or None,
            matched_artist=matched_artist or None,
            error=error
        )

    def _success_result(
        self,
        raw_text: str,
        timeline: List[LyricLine],
        has_syllable: bool,
        matched_title: Optional[str] = None,
        matched_artist: Optional[str] = None,
        is_instrumental: bool = False
    ) -> LyricResult:
        """创建成功结果；时间轴为空时标记为错误"""
        return LyricResult(
            provider_id=self.name,
            raw_text=raw_text,
            timeline=tuple(timeline) if timeline else None,
            has_syllable_timing=has_syllable and bool(timeline),
            matched_title=matched_title or None,
            matched_artist=matched_artist or None,
            error=None if timeline else "歌词解析结果为空",
            is_instrumental=is_instrumental
        )

    async def fetch(self, title: str, artist: str, duration_hint: Optional[int] = None) -> LyricResult:
        """
        获取歌词（带错误处理的包装方法）

        Args:
            title: 歌曲标题
            artist: 艺术家
            duration_hint: 歌曲时长（毫秒，可选）

        Returns:
            LyricResult，失败时 error 字段非空
        """
        self.logger.debug(f"开始获取 {self.name} 歌词: {title} - {artist}")
        try:
            result = await self._fetch_impl(title, artist, duration_hint)
        except asyncio.CancelledError:
            self.logger.debug(f"{self.name} 歌词请求已取消: {title}")
            raise
        except LyricsError as e:
            self.logger.warning(f"{self.name} 歌词获取失败 - {title}: {e}")
            return self._error_result(str(e))
        except Exception as e:
            self.logger.error(f"{self.name} 歌词获取出现意外错误 - {title}: {e}", exc_info=True)
            return self._error_result(f"{type(e).__name__}: {e}")

        if result.error:
            self.logger.info(f"{self.name} 未获取到歌词: {result.error}")
        else:
            line_count = len(result.timeline) if result.timeline else 0
            self.logger.info(
                f"{self.name} 歌词获取成功: {result.get_display_name()} "
                f"({line_count} 行, 逐字: {result.has_syllable_timing})"
            )
        return result

    async def _fetch_impl(self, title: str, artist: str, duration_hint: Optional[int]) -> LyricResult:
        """子类实现的歌词获取逻辑"""
        raise NotImplementedError
