"""
LrcApi 歌词提供者

按标题和艺术家精确查询，直接返回歌词正文（LRC，偶尔为KRC形式的纯文本）。
该接口不返回匹配到的标题，评分时由信任分补偿。
"""

import json
from typing import Optional

from islandlyrics.core.interfaces import LyricResult
from islandlyrics.lyrics.lyrics_parser import parse_krc, parse_lrc
from islandlyrics.provider.base import BaseLyricProvider
from islandlyrics.utils.http_client import LyricHttpClient


class LrcApiProvider(BaseLyricProvider):
    """LrcApi 歌词提供者"""

    PROVIDER_ID = "LrcApi"

    LYRICS_API = "https://api.lrc.cx/lyrics"

    def __init__(self, http_client: Optional[LyricHttpClient] = None):
        super().__init__(self.PROVIDER_ID, http_client)

    async def _fetch_impl(self, title: str, artist: str, duration_hint: Optional[int]) -> LyricResult:
        response = await self.http.get_text(self.LYRICS_API, params={
            'title': title,
            'artist': artist,
        })

        stripped = response.strip()
        # 未找到时返回 {"detail": "Not Found"}
        if stripped.startswith('{'):
            try:
                data = json.loads(stripped)
            except json.JSONDecodeError:
                data = None
            if isinstance(data, dict) and 'detail' in data:
                return self._error_result(f"LrcApi未找到: {data.get('detail')}")

        if not stripped or 'Lyrics not found' in response:
            return self._error_result("LrcApi未找到歌词")

        has_syllable = self._looks_like_krc(stripped)
        timeline = parse_krc(stripped) if has_syllable else parse_lrc(stripped)

        return self._success_result(
            raw_text=response,
            timeline=timeline,
            has_syllable=has_syllable
        )

    @staticmethod
    def _looks_like_krc(text: str) -> bool:
        """KRC判断：包含尖括号，且以 '[' 加数字开头（排除 [ti:] 等LRC标签）"""
        return (
            '<' in text and '>' in text
            and text.startswith('[') and len(text) > 1 and text[1].isdigit()
        )
