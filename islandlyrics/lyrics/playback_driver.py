"""
播放驱动 - 周期性刷新当前歌词行与显示内容

由外部以固定节奏调用 tick，内部无并发：
- TimelineCursor 定位当前行与逐字
- 行切换时记录节奏样本并重置 ScrollPacer
- 按滚动模式生成显示文本
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from islandlyrics.core.context import LyricsContext
from islandlyrics.core.interfaces import LyricLine, LyricResult
from .scroll_pacer import DisplayFrame, ScrollPacer, calculate_weight
from .timeline_cursor import CursorFrame, TimelineCursor

EMPTY_DISPLAY = DisplayFrame(display_text="", is_static=True)


@dataclass(frozen=True)
class TickOutput:
    """一次刷新的输出"""
    display: DisplayFrame
    cursor: Optional[CursorFrame]
    next_tick_delay: int


class PlaybackDriver:
    """
    播放驱动

    持有当前歌曲的时间轴游标和滚动控制器，每首新歌调用 load 或
    reset_for_new_song 清空节奏历史。
    """

    def __init__(self, context: LyricsContext, pacer: Optional[ScrollPacer] = None):
        """
        初始化播放驱动

        Args:
            context: 引擎上下文（提供时钟和滚动配置）
            pacer: 滚动控制器，默认按配置创建
        """
        self.logger = logging.getLogger("islandlyrics.lyrics.playback_driver")
        self.context = context
        self.scroll_mode = context.config.get_scroll_mode()
        self.pacer = pacer or ScrollPacer(max_display_weight=context.config.get_max_display_weight())
        self.cursor: Optional[TimelineCursor] = None
        self._last_line_index = -1

    def reset_for_new_song(self) -> None:
        """新歌开始：清空时间轴和节奏历史"""
        self.cursor = None
        self._last_line_index = -1
        self.pacer.reset_for_new_song()

    def load(self, result: LyricResult) -> bool:
        """
        加载歌词结果

        Returns:
            结果包含可用时间轴时返回True
        """
        self.reset_for_new_song()
        if not result.is_usable:
            self.logger.debug(f"忽略不可用的歌词结果: {result.provider_id}")
            return False
        self.load_timeline(result.timeline)
        return True

    def load_timeline(self, timeline: Sequence[LyricLine]) -> None:
        """直接加载时间轴（例如本地歌词）"""
        self.cursor = TimelineCursor(timeline)
        self._last_line_index = -1
        self.logger.info(f"时间轴已加载: {len(self.cursor)} 行")

    def tick(self, position: int, now: Optional[float] = None) -> TickOutput:
        """
        按播放位置刷新

        Args:
            position: 播放位置（毫秒）
            now: 当前时间（毫秒），默认使用上下文时钟

        Returns:
            TickOutput
        """
        if now is None:
            now = self.context.clock()

        if self.cursor is None:
            return TickOutput(display=EMPTY_DISPLAY, cursor=None, next_tick_delay=self.pacer.next_tick_delay())

        frame = self.cursor.frame(position)
        if frame is None:
            return TickOutput(display=EMPTY_DISPLAY, cursor=None, next_tick_delay=self.pacer.next_tick_delay())

        if frame.line_index != self._last_line_index:
            # 每次行切换都重置滚动（包括内容相同的重复行）
            self._last_line_index = frame.line_index
            self.pacer.record_line_change(frame.line_text, now)
            self.pacer.set_line(frame.line_text, now)

        if self.scroll_mode == 'timed':
            display = self._timed_display(self.cursor.timeline[frame.line_index], frame, position)
        else:
            display = self.pacer.render(now)

        return TickOutput(display=display, cursor=frame, next_tick_delay=self.pacer.next_tick_delay())

    def _timed_display(self, line: LyricLine, frame: CursorFrame, position: int) -> DisplayFrame:
        is_static = calculate_weight(line.text) <= self.pacer.max_display_weight
        if frame.syllables:
            split = frame.active_syllable_index + 1
            sung = "".join(syllable.text for syllable in frame.syllables[:split])
            unsung = "".join(syllable.text for syllable in frame.syllables[split:])
            return DisplayFrame(self.pacer.syllable_window(sung, unsung), is_static)
        return DisplayFrame(self.pacer.lrc_progress_window(line, position), is_static)
