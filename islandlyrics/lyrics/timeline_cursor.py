"""时间轴游标 - 根据播放位置定位当前歌词行与逐字"""

import bisect
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from islandlyrics.core.interfaces import LyricLine, SyllableInfo


@dataclass(frozen=True)
class CursorFrame:
    """提供给高亮渲染的当前行信息"""
    line_index: int
    line_text: str
    syllables: Optional[Tuple[SyllableInfo, ...]]
    active_syllable_index: int  # -1 表示尚无已唱的逐字


class TimelineCursor:
    """
    时间轴游标

    对排序后的时间轴做二分查找（O(log n)）。超过最后一行开始时间后，
    最后一行始终保持为当前行。
    """

    def __init__(self, timeline: Sequence[LyricLine]):
        """
        初始化时间轴游标

        Args:
            timeline: 按开始时间升序排列的歌词行
        """
        self.logger = logging.getLogger("islandlyrics.lyrics.timeline_cursor")
        self.timeline = tuple(timeline)
        self._start_times = [line.start_time for line in self.timeline]
        self._syllable_starts = [
            [syllable.start_time for syllable in line.syllables] if line.syllables else []
            for line in self.timeline
        ]

    def __len__(self) -> int:
        return len(self.timeline)

    def resolve(self, position: int) -> Optional[int]:
        """
        查找当前行索引

        Args:
            position: 播放位置（毫秒）

        Returns:
            满足 start_time <= position 的最后一行的索引；时间轴为空或
            位置早于第一行时返回None
        """
        index = bisect.bisect_right(self._start_times, position) - 1
        if index < 0:
            return None
        return index

    def current_line(self, position: int) -> Optional[LyricLine]:
        """获取当前歌词行"""
        index = self.resolve(position)
        return self.timeline[index] if index is not None else None

    def upcoming_line(self, position: int) -> Optional[LyricLine]:
        """获取下一行歌词，没有时返回None"""
        index = bisect.bisect_right(self._start_times, position)
        if index >= len(self.timeline):
            return None
        return self.timeline[index]

    def progress(self, position: int) -> float:
        """
        计算当前行内的播放进度

        Returns:
            0.0 到 1.0 之间的进度，没有当前行时为 0.0
        """
        line = self.current_line(position)
        if line is None or line.duration <= 0:
            return 0.0
        elapsed = position - line.start_time
        return min(1.0, max(0.0, elapsed / line.duration))

    @staticmethod
    def active_syllable_index(line: LyricLine, position: int) -> int:
        """
        查找当前已唱到的逐字索引

        逐字在 position >= start_time 的瞬间即视为已唱，不等待结束时间。

        Returns:
            最后一个已唱逐字的索引，没有逐字或尚未开始时为 -1
        """
        if not line.syllables:
            return -1
        return bisect.bisect_right(line.syllables, position, key=lambda syllable: syllable.start_time) - 1

    def frame(self, position: int) -> Optional[CursorFrame]:
        """
        生成当前位置的高亮信息

        Args:
            position: 播放位置（毫秒）

        Returns:
            CursorFrame，没有当前行时返回None
        """
        index = self.resolve(position)
        if index is None:
            return None

        line = self.timeline[index]
        return CursorFrame(
            line_index=index,
            line_text=line.text,
            syllables=line.syllables,
            active_syllable_index=bisect.bisect_right(self._syllable_starts[index], position) - 1
        )
