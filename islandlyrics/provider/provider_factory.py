"""
歌词提供者工厂 - 管理和创建歌词提供者实例

根据配置创建启用的提供者，所有提供者共享同一个HTTP客户端配置。
"""

import logging
from typing import Dict, List, Optional, Type

from islandlyrics.core.interfaces import ILyricProvider
from islandlyrics.utils.config_manager import ConfigManager
from islandlyrics.utils.http_client import LyricHttpClient
from .kugou_provider import KugouProvider
from .lrcapi_provider import LrcApiProvider
from .netease_provider import NetEaseProvider


class LyricProviderFactory:
    """
    歌词提供者工厂

    负责管理所有歌词提供者，提供按名称查询和按配置批量创建的接口。
    """

    PROVIDER_CLASSES: Dict[str, Type[ILyricProvider]] = {
        'kugou': KugouProvider,
        'netease': NetEaseProvider,
        'lrcapi': LrcApiProvider,
    }

    def __init__(self, config: Optional[ConfigManager] = None, http_client: Optional[LyricHttpClient] = None):
        """
        初始化歌词提供者工厂

        Args:
            config: 配置管理器
            http_client: 共享的HTTP客户端，默认按配置创建
        """
        self.logger = logging.getLogger("islandlyrics.provider.factory")
        self.config = config or ConfigManager.from_dict({})
        self.http_client = http_client or LyricHttpClient(timeout=self.config.get_http_timeout())

        self._provider_map: Dict[str, ILyricProvider] = {}
        for name in self.config.get_enabled_providers():
            provider_class = self.PROVIDER_CLASSES.get(name)
            if provider_class is None:
                self.logger.warning(f"未知的歌词提供者: {name}")
                continue
            self._provider_map[name] = provider_class(http_client=self.http_client)

        self.logger.debug(f"已启用歌词提供者: {', '.join(self._provider_map.keys())}")

    def get_supported_providers(self) -> List[str]:
        """获取所有支持的提供者名称"""
        return list(self.PROVIDER_CLASSES.keys())

    def get_provider_by_name(self, name: str) -> Optional[ILyricProvider]:
        """
        根据名称获取已启用的提供者

        Args:
            name: 提供者名称

        Returns:
            提供者实例，未启用时返回None
        """
        return self._provider_map.get(name.lower())

    def get_providers(self) -> List[ILyricProvider]:
        """获取所有已启用的提供者"""
        return list(self._provider_map.values())
