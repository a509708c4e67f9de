"""
歌词HTTP客户端 - 对第三方歌词接口的统一请求封装

- 连接/读取超时各10秒
- 不跟随重定向，不重试
- 不校验TLS证书（第三方抓取接口常见自签名或域名不匹配）
- 每次请求使用独立的会话，取消时连接随 async with 一起关闭
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from islandlyrics.core.interfaces import MalformedResponse, NetworkFailure

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


class LyricHttpClient:
    """歌词接口HTTP客户端"""

    def __init__(self, timeout: float = 10):
        """
        初始化HTTP客户端

        Args:
            timeout: 连接和读取超时（秒）
        """
        self.logger = logging.getLogger("islandlyrics.utils.http_client")
        self.timeout = aiohttp.ClientTimeout(total=None, sock_connect=timeout, sock_read=timeout)

    def _create_session(self) -> aiohttp.ClientSession:
        """创建单次请求使用的会话"""
        connector = aiohttp.TCPConnector(ssl=False)
        return aiohttp.ClientSession(timeout=self.timeout, connector=connector)

    async def get_text(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> str:
        """
        发送GET请求并返回响应文本

        Raises:
            NetworkFailure: 超时、连接错误或非200状态码
        """
        request_headers = dict(DEFAULT_HEADERS)
        if headers:
            request_headers.update(headers)

        self.logger.debug(f"请求: {url} 参数: {params}")
        try:
            async with self._create_session() as session:
                async with session.get(
                    url,
                    params=params,
                    headers=request_headers,
                    allow_redirects=False
                ) as response:
                    if response.status != 200:
                        raise NetworkFailure(f"HTTP {response.status}: {url}")
                    text_response = await response.text()
                    self.logger.debug(f"响应文本长度: {len(text_response)}")
                    return text_response
        except asyncio.TimeoutError as e:
            raise NetworkFailure(f"请求超时: {url}") from e
        except aiohttp.ClientError as e:
            raise NetworkFailure(f"请求失败: {url}: {e}") from e

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        发送GET请求并将响应解析为JSON对象

        无论内容类型如何都尝试解析为JSON。

        Raises:
            NetworkFailure: 请求失败
            MalformedResponse: 空响应、非JSON或非对象
        """
        text_response = await self.get_text(url, params=params, headers=headers)
        if not text_response.strip():
            raise MalformedResponse(f"收到空响应: {url}")

        try:
            data = json.loads(text_response)
        except json.JSONDecodeError as e:
            self.logger.debug(f"响应内容（前300字符）: {text_response[:300]}...")
            raise MalformedResponse(f"响应不是有效的JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponse(f"响应不是JSON对象: {url}")
        return data
