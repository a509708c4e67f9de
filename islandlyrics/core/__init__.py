"""核心模块 - 共享数据类型、接口和引擎上下文"""

from .interfaces import (
    DecodeFailure,
    ILyricProvider,
    LyricLine,
    LyricResult,
    LyricsError,
    MalformedResponse,
    NetworkFailure,
    SongQuery,
    SyllableInfo,
)
from .context import LyricsContext, monotonic_ms

__all__ = [
    'DecodeFailure',
    'ILyricProvider',
    'LyricLine',
    'LyricResult',
    'LyricsError',
    'MalformedResponse',
    'NetworkFailure',
    'SongQuery',
    'SyllableInfo',
    'LyricsContext',
    'monotonic_ms',
]
