"""
歌词管理器测试

测试歌曲切换时的取消、过期结果丢弃和按歌曲缓存。
"""

import asyncio
from typing import List, Optional

import pytest

from islandlyrics.core.context import LyricsContext
from islandlyrics.core.interfaces import LyricResult, SongQuery
from islandlyrics.lyrics.lyrics_manager import LyricsManager
from islandlyrics.lyrics.lyrics_parser import parse_lrc
from islandlyrics.utils.config_manager import ConfigManager


def make_result(title: str) -> LyricResult:
    return LyricResult(
        provider_id="Netease",
        raw_text="[00:01.00]Hello",
        timeline=tuple(parse_lrc("[00:01.00]Hello")),
        matched_title=title
    )


class FakeSelector:
    """按标题返回结果的选择器"""

    def __init__(self, delays=None, missing=()):
        self.delays = delays or {}
        self.missing = set(missing)
        self.calls: List[str] = []
        self.on_fetch = None

    async def fetch_best(self, title: str, artist: str, duration_hint: Optional[int] = None):
        self.calls.append(title)
        await asyncio.sleep(self.delays.get(title, 0))
        if self.on_fetch is not None:
            self.on_fetch(title)
        if title in self.missing:
            return None
        return make_result(title)


def make_manager(selector, **lyrics_config):
    config = ConfigManager.from_dict({"lyrics": lyrics_config})
    return LyricsManager(LyricsContext(config=config), selector=selector)


class TestLyricsManager:
    """测试歌词获取生命周期"""

    @pytest.mark.asyncio
    async def test_request_lyrics(self):
        manager = make_manager(FakeSelector())
        query = SongQuery("Song", "Artist")

        outcome = await manager.request_lyrics(query)

        assert outcome.query == query
        assert not outcome.is_stale
        assert outcome.result.matched_title == "Song"
        assert manager.current_query == query

    @pytest.mark.asyncio
    async def test_new_song_cancels_previous_fetch(self):
        """测试新歌曲取消进行中的旧任务"""
        selector = FakeSelector(delays={"Old": 30})
        manager = make_manager(selector)

        old_task = manager.request_lyrics(SongQuery("Old", "Artist"))
        await asyncio.sleep(0.01)
        new_task = manager.request_lyrics(SongQuery("New", "Artist"))

        with pytest.raises(asyncio.CancelledError):
            await old_task
        outcome = await new_task
        assert outcome.result.matched_title == "New"

    @pytest.mark.asyncio
    async def test_metadata_change_cancels_fetch(self):
        selector = FakeSelector(delays={"Old": 30})
        manager = make_manager(selector)

        task = manager.request_lyrics(SongQuery("Old", "Artist"))
        await asyncio.sleep(0.01)

        assert manager.on_metadata_changed(SongQuery("Old", "Artist")) is False
        assert not task.done()

        assert manager.on_metadata_changed(SongQuery("New", "Artist")) is True
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self):
        """测试完成时歌曲已变化的结果被丢弃"""
        selector = FakeSelector()
        manager = make_manager(selector, cache_enabled=False)
        old_query = SongQuery("Old", "Artist")
        manager.on_metadata_changed(old_query)
        selector.on_fetch = lambda title: manager.on_metadata_changed(SongQuery("New", "Artist"))

        outcome = await manager._run_fetch(old_query)

        assert outcome.is_stale
        assert outcome.result is None

    @pytest.mark.asyncio
    async def test_no_result(self):
        manager = make_manager(FakeSelector(missing={"Silent"}))
        outcome = await manager.request_lyrics(SongQuery("Silent", "Artist"))
        assert outcome.result is None
        assert not outcome.is_stale

    @pytest.mark.asyncio
    async def test_cache_hits_found_lyrics_only(self):
        """测试只缓存找到的歌词，未找到时下次重新请求"""
        selector = FakeSelector(missing={"Silent"})
        manager = make_manager(selector)

        first = await manager.fetch_lyrics(SongQuery("Song", "Artist"))
        second = await manager.fetch_lyrics(SongQuery(" song ", "ARTIST"))
        assert first is second

        assert await manager.fetch_lyrics(SongQuery("Silent", "Artist")) is None
        assert await manager.fetch_lyrics(SongQuery("Silent", "Artist")) is None

        assert selector.calls == ["Song", "Silent", "Silent"]
        assert manager.get_cache_stats()['cache_size'] == 1

    @pytest.mark.asyncio
    async def test_refetch_after_failed_lookup(self):
        """测试一次失败（如网络中断）后同一首歌可以重新获取"""
        selector = FakeSelector(missing={"Song"})
        manager = make_manager(selector)
        query = SongQuery("Song", "Artist")

        first = await manager.request_lyrics(query)
        assert first.result is None

        selector.missing.clear()
        second = await manager.request_lyrics(query)

        assert second.result is not None
        assert second.result.matched_title == "Song"
        assert selector.calls == ["Song", "Song"]

    @pytest.mark.asyncio
    async def test_cache_evicts_oldest(self):
        manager = make_manager(FakeSelector(), max_cache_size=2)
        for title in ("A", "B", "C"):
            await manager.fetch_lyrics(SongQuery(title, "Artist"))

        stats = manager.get_cache_stats()
        assert stats['cache_size'] == 2
        assert "a|artist" not in manager._lyrics_cache

        manager.clear_cache()
        assert manager.get_cache_stats()['cache_size'] == 0

    @pytest.mark.asyncio
    async def test_cache_disabled(self):
        selector = FakeSelector()
        manager = make_manager(selector, cache_enabled=False)
        await manager.fetch_lyrics(SongQuery("Song", "Artist"))
        await manager.fetch_lyrics(SongQuery("Song", "Artist"))
        assert selector.calls == ["Song", "Song"]
