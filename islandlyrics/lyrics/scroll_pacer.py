"""
滚动节奏控制器 - 在固定宽度的显示区域中滚动过长的歌词行

提供以下功能：
- 视觉权重计算（中日韩字符计2，其余计1）
- 按权重截取窗口，并避免截断西文单词
- 单行滚动状态机（初始停顿 → 滚动 → 结束停顿 → 完成）
- 根据实际演唱节奏自适应的滚动间隔
- 逐字/LRC 进度驱动的时间窗口
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from islandlyrics.core.interfaces import LyricLine

# 显示容量：约9个中文字符或18个西文字符
MAX_DISPLAY_WEIGHT = 18
# 剩余权重不超过该值时停止滚动，一次显示全部剩余内容
COMPENSATION_THRESHOLD = 8

INITIAL_PAUSE_DURATION = 1000
FINAL_PAUSE_DURATION = 500
BASE_FOCUS_DELAY = 500  # 每次移动的视线重新聚焦时间
STATIC_TIME_RESERVE = 1500  # 初始停顿 + 结束停顿

DEFAULT_SCROLL_DELAY = 1800
MIN_SCROLL_DELAY = 500
MAX_SCROLL_DELAY = 5000
DONE_TICK_DELAY = 1000
AVERAGE_SHIFT_WEIGHT = 5

MAX_HISTORY = 5
MIN_CHAR_DURATION = 50
MAX_LINE_GAP = 30000

# 时间窗口模式参数
SCROLL_START_THRESHOLD = 8
MIN_VISIBLE_WEIGHT = 14
LRC_DEFERRED_PROGRESS = 0.3

_WIDE_RANGES = (
    (0x4E00, 0x9FFF),    # CJK Unified Ideographs
    (0x3400, 0x4DBF),    # CJK Unified Ideographs Extension A
    (0x20000, 0x2A6DF),  # CJK Unified Ideographs Extension B
    (0xF900, 0xFAFF),    # CJK Compatibility Ideographs
    (0x3040, 0x309F),    # Hiragana
    (0x30A0, 0x30FF),    # Katakana
    (0xAC00, 0xD7AF),    # Hangul Syllables
)


def char_weight(ch: str) -> int:
    """计算单个字符的视觉权重（中日韩=2，其他=1）"""
    code = ord(ch)
    for low, high in _WIDE_RANGES:
        if low <= code <= high:
            return 2
    return 1


def calculate_weight(text: str) -> int:
    """计算字符串的总视觉权重"""
    return sum(char_weight(ch) for ch in text)


def extract_by_weight(text: str, start_weight: int, max_weight: int) -> str:
    """
    按视觉权重截取子串

    从累计权重达到 start_weight 的字符开始，截取不超过 max_weight 的内容。
    如果截断点位于西文单词中间，则回退到单词前的空格。

    Args:
        text: 原始文本
        start_weight: 起始位置（权重单位）
        max_weight: 窗口容量（权重单位）

    Returns:
        截取并去除尾部空白的子串
    """
    current_weight = 0
    start_index = None
    for i, ch in enumerate(text):
        if current_weight >= start_weight:
            start_index = i
            break
        current_weight += char_weight(ch)

    if start_index is None:
        return ""

    current_weight = 0
    end_index = start_index
    for i in range(start_index, len(text)):
        current_weight += char_weight(text[i])
        if current_weight > max_weight:
            break
        end_index = i + 1

    if end_index <= start_index:
        return ""

    if end_index < len(text):
        char_at_cut = text[end_index]
        char_before_cut = text[end_index - 1]
        # 仅对西文字符生效，中日韩字符可在任意位置截断
        if (char_weight(char_at_cut) == 1 and char_weight(char_before_cut) == 1
                and char_at_cut.isalnum() and char_before_cut.isalnum()):
            for i in range(end_index - 1, start_index, -1):
                if text[i].isspace():
                    end_index = i
                    break

    return text[start_index:end_index].rstrip()


def calculate_smart_shift_weight(text: str, current_offset: int) -> int:
    """
    计算一次滚动的移动量

    中文：移动2个字符（4权重）；西文：移动3-4个字符，优先对齐到空格。
    """
    segment = extract_by_weight(text, current_offset, 10)
    if not segment:
        return 4

    cjk_count = sum(1 for ch in segment if char_weight(ch) == 2)
    if cjk_count > len(segment) // 2:
        if len(segment) >= 2:
            return char_weight(segment[0]) + char_weight(segment[1])
        return 4

    space_index = segment.find(' ', 2)
    if 2 <= space_index <= 4:
        return calculate_weight(segment[:space_index + 1])
    if len(segment) >= 3:
        return calculate_weight(segment[:3])
    return 3


class ScrollPhase(Enum):
    """单行滚动状态"""
    INITIAL_PAUSE = "initial_pause"
    SCROLLING = "scrolling"
    FINAL_PAUSE = "final_pause"
    DONE = "done"


@dataclass
class ScrollState:
    """当前显示行的滚动状态"""
    phase: ScrollPhase = ScrollPhase.INITIAL_PAUSE
    offset_weight: int = 0
    phase_start_time: float = 0


@dataclass(frozen=True)
class DisplayFrame:
    """提供给外部渲染的显示内容"""
    display_text: str
    is_static: bool


class PacingHistory:
    """
    歌词行时长的滑动窗口

    每首新歌开始时清空；线程间只做简单的加锁追加与读取。
    """

    def __init__(self, max_history: int = MAX_HISTORY):
        self._durations: Deque[int] = deque(maxlen=max_history)
        self._lock = threading.Lock()
        self.last_change_time: Optional[float] = None
        self.last_length = 0

    def clear(self) -> None:
        with self._lock:
            self._durations.clear()
            self.last_change_time = None
            self.last_length = 0

    def record(self, new_text: str, now: float) -> Optional[int]:
        """
        记录一次歌词切换

        Args:
            new_text: 新歌词行文本
            now: 当前时间（毫秒）

        Returns:
            被采纳的时长样本，被过滤时返回None
        """
        with self._lock:
            # 第一行没有上一次的时间
            if self.last_change_time is None:
                self.last_change_time = now
                self.last_length = len(new_text)
                return None

            duration = int(now - self.last_change_time)
            avg_char_duration = duration // self.last_length if self.last_length > 0 else 0

            # 过快的切换视为噪声
            if avg_char_duration < MIN_CHAR_DURATION:
                return None

            # 过长的间隔视为暂停，只重置计时
            if duration > MAX_LINE_GAP:
                self.last_change_time = now
                self.last_length = len(new_text)
                return None

            self._durations.append(duration)
            self.last_change_time = now
            self.last_length = len(new_text)
            return duration

    def samples(self) -> List[int]:
        with self._lock:
            return list(self._durations)

    def average(self) -> Optional[int]:
        with self._lock:
            if not self._durations:
                return None
            return int(sum(self._durations) / len(self._durations))


class ScrollPacer:
    """
    单行歌词滚动控制器

    每次显示行变化（包括内容相同的重复行）时调用 set_line 重置状态，
    之后由周期性驱动调用 render 获取当前应显示的内容。
    """

    def __init__(
        self,
        max_display_weight: int = MAX_DISPLAY_WEIGHT,
        compensation_threshold: int = COMPENSATION_THRESHOLD,
        initial_pause: int = INITIAL_PAUSE_DURATION,
        final_pause: int = FINAL_PAUSE_DURATION,
        history: Optional[PacingHistory] = None
    ):
        """
        初始化滚动控制器

        Args:
            max_display_weight: 显示容量（权重单位）
            compensation_threshold: 停止滚动的剩余权重阈值
            initial_pause: 初始停顿（毫秒）
            final_pause: 结束停顿（毫秒）
            history: 歌词行时长历史，默认新建
        """
        self.logger = logging.getLogger("islandlyrics.lyrics.scroll_pacer")
        self.max_display_weight = max_display_weight
        self.compensation_threshold = compensation_threshold
        self.initial_pause = initial_pause
        self.final_pause = final_pause
        self.history = history or PacingHistory()

        self.state = ScrollState()
        self.adaptive_delay = DEFAULT_SCROLL_DELAY
        self._text = ""
        self._total_weight = 0

    def reset_for_new_song(self) -> None:
        """新歌开始：清空节奏历史和滚动状态"""
        self.history.clear()
        self.adaptive_delay = DEFAULT_SCROLL_DELAY
        self._text = ""
        self._total_weight = 0
        self.state = ScrollState()
        self.logger.debug("滚动节奏历史已重置")

    def set_line(self, text: str, now: float) -> None:
        """
        切换到新的显示行并重置滚动状态

        Args:
            text: 新行文本
            now: 当前时间（毫秒）
        """
        self._text = text or ""
        self._total_weight = calculate_weight(self._text)
        self.state = ScrollState(phase=ScrollPhase.INITIAL_PAUSE, offset_weight=0, phase_start_time=now)

    def record_line_change(self, new_text: str, now: float) -> None:
        """
        记录一次自然的歌词切换并重新计算滚动间隔

        需在 set_line 之前调用，此时的当前行即刚刚唱完的行。
        """
        sample = self.history.record(new_text, now)
        if sample is None:
            self.logger.debug(f"忽略节奏样本: {new_text[:20]}")
            return
        self._calculate_adaptive_delay()

    def _calculate_adaptive_delay(self) -> None:
        avg_duration = self.history.average()
        line_weight = self._total_weight

        if avg_duration is None or line_weight == 0 or avg_duration < STATIC_TIME_RESERVE:
            self.adaptive_delay = DEFAULT_SCROLL_DELAY
            return

        # 预计移动次数（每次约5权重）
        estimated_steps = max(1, line_weight // AVERAGE_SHIFT_WEIGHT)
        available_time = avg_duration - STATIC_TIME_RESERVE - estimated_steps * BASE_FOCUS_DELAY
        if available_time > 0:
            time_per_unit = available_time // line_weight
        else:
            time_per_unit = 100

        calculated = BASE_FOCUS_DELAY + time_per_unit * AVERAGE_SHIFT_WEIGHT
        self.adaptive_delay = min(MAX_SCROLL_DELAY, max(MIN_SCROLL_DELAY, calculated))
        self.logger.debug(
            f"自适应滚动间隔: {self.adaptive_delay}ms (权重: {line_weight}, 每单位: {time_per_unit}ms)"
        )

    def next_tick_delay(self) -> int:
        """下一次刷新前的建议等待时间（毫秒）"""
        if self.state.phase == ScrollPhase.DONE:
            return DONE_TICK_DELAY
        return self.adaptive_delay

    def render(self, now: float) -> DisplayFrame:
        """
        推进状态机并返回当前应显示的内容

        Args:
            now: 当前时间（毫秒）

        Returns:
            DisplayFrame
        """
        text = self._text
        total_weight = self._total_weight
        state = self.state

        if total_weight <= self.max_display_weight:
            state.phase = ScrollPhase.DONE
            return DisplayFrame(display_text=text, is_static=True)

        if state.phase == ScrollPhase.INITIAL_PAUSE:
            if now - state.phase_start_time >= self.initial_pause:
                state.phase = ScrollPhase.SCROLLING
                state.phase_start_time = now
            display = extract_by_weight(text, 0, self.max_display_weight)

        elif state.phase == ScrollPhase.SCROLLING:
            if now - state.phase_start_time >= self.adaptive_delay:
                if total_weight - state.offset_weight > self.max_display_weight:
                    state.offset_weight += calculate_smart_shift_weight(text, state.offset_weight)
                state.phase_start_time = now

            remaining_weight = total_weight - state.offset_weight
            if remaining_weight <= self.compensation_threshold:
                state.phase = ScrollPhase.FINAL_PAUSE
                state.phase_start_time = now
                display = extract_by_weight(text, state.offset_weight, remaining_weight)
            elif remaining_weight <= self.max_display_weight:
                state.phase = ScrollPhase.FINAL_PAUSE
                state.phase_start_time = now
                display = extract_by_weight(text, state.offset_weight, self.max_display_weight)
            else:
                display = extract_by_weight(text, state.offset_weight, self.max_display_weight)

        else:
            remaining_weight = total_weight - state.offset_weight
            display = extract_by_weight(
                text, state.offset_weight, max(remaining_weight, self.max_display_weight)
            )
            if state.phase == ScrollPhase.FINAL_PAUSE and now - state.phase_start_time >= self.final_pause:
                state.phase = ScrollPhase.DONE

        return DisplayFrame(display_text=display, is_static=state.phase == ScrollPhase.DONE)

    def syllable_window(self, sung: str, unsung: str) -> str:
        """
        逐字模式的显示窗口

        已唱部分未超过阈值前从行首显示，之后向左滚动并保留已唱的末尾；
        始终至少保留 MIN_VISIBLE_WEIGHT 的可见内容。
        """
        sung_weight = calculate_weight(sung)
        total_weight = sung_weight + calculate_weight(unsung)
        full_text = sung + unsung

        if total_weight <= self.max_display_weight:
            return full_text

        target_scroll = 0 if sung_weight < SCROLL_START_THRESHOLD else sung_weight - SCROLL_START_THRESHOLD
        max_allowed_scroll = max(0, total_weight - MIN_VISIBLE_WEIGHT)
        return extract_by_weight(full_text, min(target_scroll, max_allowed_scroll), self.max_display_weight)

    def lrc_progress_window(self, line: LyricLine, position: int) -> str:
        """
        LRC模式的显示窗口

        行进度前30%不滚动，之后按进度线性滚动，并保留至少 MIN_VISIBLE_WEIGHT。
        """
        line_weight = calculate_weight(line.text)
        if line_weight <= self.max_display_weight:
            return line.text

        if line.duration > 0:
            progress = min(1.0, max(0.0, (position - line.start_time) / line.duration))
        else:
            progress = 0.0

        deferred = min(1.0, max(0.0, (progress - LRC_DEFERRED_PROGRESS) / (1 - LRC_DEFERRED_PROGRESS)))
        target_offset = int(deferred * (line_weight - self.max_display_weight))
        max_allowed_scroll = max(0, line_weight - MIN_VISIBLE_WEIGHT)
        return extract_by_weight(line.text, min(target_offset, max_allowed_scroll), self.max_display_weight)
