"""
引擎上下文 - 显式传入引擎各组件的共享依赖

替代全局单例：配置、提供者列表和时钟都通过该对象注入。
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from islandlyrics.core.interfaces import ILyricProvider
from islandlyrics.utils.config_manager import ConfigManager


def monotonic_ms() -> float:
    """单调时钟（毫秒）"""
    return time.monotonic() * 1000


@dataclass
class LyricsContext:
    """歌词引擎上下文"""
    config: ConfigManager
    providers: List[ILyricProvider] = field(default_factory=list)
    clock: Callable[[], float] = monotonic_ms

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "LyricsContext":
        """
        按配置创建上下文，提供者由工厂根据配置创建

        Args:
            config: 配置管理器，默认使用空配置（全部默认值）
        """
        # 延迟导入以避免循环依赖
        from islandlyrics.provider.provider_factory import LyricProviderFactory

        config = config or ConfigManager.from_dict({})
        factory = LyricProviderFactory(config)
        return cls(config=config, providers=factory.get_providers())
