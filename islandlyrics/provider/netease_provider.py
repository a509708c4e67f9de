"""
网易云音乐歌词提供者

搜索歌曲后按歌曲ID获取LRC歌词，并识别纯音乐曲目。
"""

from typing import Any, Dict, List, Optional

from islandlyrics.core.interfaces import LyricResult
from islandlyrics.lyrics.lyrics_parser import parse_lrc
from islandlyrics.provider.base import BaseLyricProvider
from islandlyrics.utils.http_client import LyricHttpClient
from islandlyrics.utils.text_utils import is_instrumental_text

# 时长提示与搜索结果的最大允许差值（毫秒）
DURATION_TOLERANCE = 3000


class NetEaseProvider(BaseLyricProvider):
    """网易云音乐歌词提供者"""

    PROVIDER_ID = "Netease"

    SEARCH_API = "https://music.163.com/api/search/get"
    LYRIC_API = "https://music.163.com/api/song/lyric"

    def __init__(self, http_client: Optional[LyricHttpClient] = None):
        super().__init__(self.PROVIDER_ID, http_client)

        # 网易API请求头
        self.headers = {
            "Referer": "https://music.163.com",
        }

    async def _fetch_impl(self, title: str, artist: str, duration_hint: Optional[int]) -> LyricResult:
        search_data = await self.http.get_json(self.SEARCH_API, params={
            's': f"{title} {artist}".strip(),
            'type': 1,  # 1 = 歌曲
            'limit': 10,
        }, headers=self.headers)

        result = search_data.get('result')
        songs = result.get('songs') if isinstance(result, dict) else None
        if not songs:
            return self._error_result("网易云未找到歌曲")

        song = self._pick_song(songs, duration_hint)
        matched_title = song.get('name', '')
        matched_artist = self._first_artist(song)
        song_id = song.get('id') or 0

        if not song_id:
            return self._error_result("无歌曲ID", matched_title, matched_artist)

        lyric_data = await self.http.get_json(self.LYRIC_API, params={
            'id': song_id,
            'lv': -1,
            'tv': -1,
        }, headers=self.headers)

        lrc = lyric_data.get('lrc')
        lyric_content = (lrc.get('lyric', '') if isinstance(lrc, dict) else '') or ''

        no_lyric_flag = bool(lyric_data.get('nolyric') or lyric_data.get('uncollected'))
        if not lyric_content:
            if no_lyric_flag:
                self.logger.info(f"网易云标记为纯音乐/无歌词: {matched_title}")
            return LyricResult(
                provider_id=self.name,
                matched_title=matched_title or None,
                matched_artist=matched_artist or None,
                error="歌词内容为空",
                is_instrumental=no_lyric_flag
            )

        is_instrumental = no_lyric_flag or self._is_instrumental_lyric(lyric_content)
        if is_instrumental:
            self.logger.info(f"检测到纯音乐: {matched_title}")

        return self._success_result(
            raw_text=lyric_content,
            timeline=parse_lrc(lyric_content),
            has_syllable=False,
            matched_title=matched_title,
            matched_artist=matched_artist,
            is_instrumental=is_instrumental
        )

    def _pick_song(self, songs: List[Dict[str, Any]], duration_hint: Optional[int]) -> Dict[str, Any]:
        """
        从搜索结果中选择歌曲

        有时长提示时优先选择时长最接近且在容差内的结果，否则取第一个。
        """
        if duration_hint:
            best_song = None
            best_diff = DURATION_TOLERANCE + 1
            for song in songs:
                duration = song.get('duration') or 0
                if not duration:
                    continue
                diff = abs(duration - duration_hint)
                if diff < best_diff:
                    best_diff = diff
                    best_song = song
            if best_song is not None:
                self.logger.debug(f"按时长匹配歌曲: {best_song.get('name')} (差值 {best_diff}ms)")
                return best_song
        return songs[0]

    @staticmethod
    def _first_artist(song: Dict[str, Any]) -> str:
        artists = song.get('artists') or []
        if artists and isinstance(artists[0], dict):
            return artists[0].get('name', '')
        return ''

    @staticmethod
    def _is_instrumental_lyric(lyric_content: str) -> bool:
        """
        检查歌词是否只是纯音乐提示

        只检查带文本的行；提示通常是唯一的一行或少数几行。
        """
        text_lines = [line for line in parse_lrc(lyric_content) if line.text]
        if not text_lines or len(text_lines) > 3:
            return False
        return any(is_instrumental_text(line.text) for line in text_lines)
