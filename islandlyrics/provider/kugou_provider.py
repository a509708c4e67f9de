"""
酷狗歌词提供者

请求流程：
1. 关键词搜索歌曲，取第一个结果的 hash
2. 按 hash 搜索歌词候选
3. 候选中没有内容时，用 id + accesskey 下载KRC
歌词内容经过酷狗加密，使用 kugou_crypto 解码。
"""

from typing import Any, Dict, Optional

from islandlyrics.core.interfaces import LyricResult, MalformedResponse
from islandlyrics.lyrics.lyrics_parser import parse_lyrics
from islandlyrics.provider.base import BaseLyricProvider
from islandlyrics.utils.http_client import LyricHttpClient
from islandlyrics.utils.kugou_crypto import KugouCrypto, get_crypto


class KugouProvider(BaseLyricProvider):
    """酷狗歌词提供者"""

    PROVIDER_ID = "Kugou"

    SEARCH_API = "https://mobilecdn.kugou.com/api/v3/search/song"
    LYRIC_SEARCH_API = "https://lyrics.kugou.com/search"
    LYRIC_DOWNLOAD_API = "https://lyrics.kugou.com/download"

    def __init__(self, http_client: Optional[LyricHttpClient] = None, crypto: Optional[KugouCrypto] = None):
        super().__init__(self.PROVIDER_ID, http_client)
        self.crypto = crypto or get_crypto()

    async def _fetch_impl(self, title: str, artist: str, duration_hint: Optional[int]) -> LyricResult:
        search_data = await self.http.get_json(self.SEARCH_API, params={
            'format': 'json',
            'keyword': f"{title} {artist}".strip(),
            'page': 1,
            'pagesize': 20,
            'showtype': 1,
        })

        data = search_data.get('data')
        songs = data.get('info') if isinstance(data, dict) else None
        if not songs:
            return self._error_result("酷狗未找到歌曲")

        first_song = songs[0]
        if not isinstance(first_song, dict):
            raise MalformedResponse("酷狗搜索结果格式异常")

        matched_title = first_song.get('songname', '')
        matched_artist = first_song.get('singername', '')
        song_hash = first_song.get('hash', '')
        self.logger.debug(f"酷狗匹配歌曲: {matched_title} - {matched_artist} ({song_hash})")

        if not song_hash:
            return self._error_result("无歌曲hash", matched_title, matched_artist)

        candidate = await self._search_candidate(song_hash, duration_hint)
        if candidate is None:
            return self._error_result("无候选歌词", matched_title, matched_artist)

        lyric_encoded = candidate.get('content', '') or ''
        if not lyric_encoded:
            lyric_encoded = await self._download_lyric(candidate)

        if not lyric_encoded:
            return self._error_result("歌词内容为空", matched_title, matched_artist)

        lyric_content = self.crypto.decode_lyric(lyric_encoded)
        timeline, has_syllable = parse_lyrics(lyric_content)

        return self._success_result(
            raw_text=lyric_content,
            timeline=timeline,
            has_syllable=has_syllable,
            matched_title=matched_title,
            matched_artist=matched_artist
        )

    async def _search_candidate(self, song_hash: str, duration_hint: Optional[int]) -> Optional[Dict[str, Any]]:
        """按歌曲hash搜索歌词候选，返回第一个候选"""
        lyric_data = await self.http.get_json(self.LYRIC_SEARCH_API, params={
            'ver': 1,
            'man': 'yes',
            'client': 'pc',
            'keyword': '',
            'duration': duration_hint if duration_hint else '',
            'hash': song_hash,
        })

        candidates = lyric_data.get('candidates')
        if not candidates or not isinstance(candidates[0], dict):
            return None
        return candidates[0]

    async def _download_lyric(self, candidate: Dict[str, Any]) -> str:
        """
        使用 id 和 accesskey 下载加密歌词

        下载失败不影响已匹配的元数据，返回空字符串。
        """
        lyric_id = str(candidate.get('id', '') or '')
        access_key = str(candidate.get('accesskey', '') or '')
        if not lyric_id or not access_key:
            return ''

        try:
            download_data = await self.http.get_json(self.LYRIC_DOWNLOAD_API, params={
                'ver': 1,
                'client': 'pc',
                'id': lyric_id,
                'accesskey': access_key,
                'fmt': 'krc',
                'charset': 'utf8',
            })
        except MalformedResponse as e:
            self.logger.warning(f"酷狗下载响应解析失败: {e}")
            return ''

        return download_data.get('content', '') or ''
