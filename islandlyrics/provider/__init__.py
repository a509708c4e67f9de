"""
歌词提供者模块 - 酷狗、网易云音乐和 LrcApi 的歌词获取实现
"""

from .base import BaseLyricProvider
from .kugou_provider import KugouProvider
from .netease_provider import NetEaseProvider
from .lrcapi_provider import LrcApiProvider
from .provider_factory import LyricProviderFactory

__all__ = [
    'BaseLyricProvider',
    'KugouProvider',
    'NetEaseProvider',
    'LrcApiProvider',
    'LyricProviderFactory',
]
