"""
核心接口定义 - 歌词引擎各模块之间共享的数据类型和抽象接口

提供依赖倒置的基础，减少模块间的耦合度：
- 歌词时间轴数据（逐行 / 逐字）
- 歌词提供者的统一结果与接口
- 引擎内部使用的异常分类
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple


class LyricsError(Exception):
    """歌词引擎异常基类"""


class NetworkFailure(LyricsError):
    """网络失败：超时、连接被拒绝或非2xx状态码"""


class MalformedResponse(LyricsError):
    """响应格式异常：非JSON、缺少字段或结构不符合预期"""


class DecodeFailure(LyricsError):
    """歌词解密或解压失败"""


@dataclass(frozen=True)
class SyllableInfo:
    """逐字信息（毫秒，相对歌曲开头）"""
    start_time: int
    end_time: int
    text: str


@dataclass(frozen=True)
class LyricLine:
    """
    单行歌词

    syllables 存在时，所有逐字文本拼接后等于 text。
    """
    start_time: int  # 毫秒
    end_time: int  # 毫秒
    text: str
    syllables: Optional[Tuple[SyllableInfo, ...]] = None

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class LyricResult:
    """
    单次提供者调用的结果

    每次调用创建一次，评分后不再修改（评分通过 dataclasses.replace 生成新对象）。
    """
    provider_id: str
    raw_text: Optional[str] = None
    timeline: Optional[Tuple[LyricLine, ...]] = None
    has_syllable_timing: bool = False
    score: int = 0
    matched_title: Optional[str] = None
    matched_artist: Optional[str] = None
    error: Optional[str] = None
    is_instrumental: bool = False

    @property
    def is_usable(self) -> bool:
        """是否包含可用于显示的时间轴"""
        return self.error is None and bool(self.timeline)

    def get_display_name(self) -> str:
        """
        获取用于日志显示的结果描述

        Returns:
            形如 "Kugou: 标题 - 艺术家" 的字符串
        """
        title = self.matched_title or "未知标题"
        if self.matched_artist:
            return f"{self.provider_id}: {title} - {self.matched_artist}"
        return f"{self.provider_id}: {title}"


@dataclass(frozen=True)
class SongQuery:
    """外部媒体会话提供的歌曲元数据"""
    title: str
    artist: str
    duration_hint: Optional[int] = None  # 毫秒

    @property
    def song_id(self) -> str:
        """用于识别过期结果的歌曲标签"""
        return f"{self.title}|{self.artist}"


class ILyricProvider(ABC):
    """歌词提供者接口 - 搜索、解析句柄并获取歌词正文"""

    name: str

    @abstractmethod
    async def fetch(self, title: str, artist: str, duration_hint: Optional[int] = None) -> LyricResult:
        """
        获取歌词

        实现不得抛出除 asyncio.CancelledError 以外的异常，
        所有失败都以带 error 的 LyricResult 返回。
        """
        pass
