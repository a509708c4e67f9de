"""
滚动节奏控制器测试

测试视觉权重、窗口截取、滚动状态机、补偿规则和自适应滚动间隔。
"""

import unittest

from islandlyrics.core.interfaces import LyricLine
from islandlyrics.lyrics.scroll_pacer import (
    COMPENSATION_THRESHOLD,
    DEFAULT_SCROLL_DELAY,
    DONE_TICK_DELAY,
    MAX_SCROLL_DELAY,
    PacingHistory,
    ScrollPacer,
    ScrollPhase,
    calculate_smart_shift_weight,
    calculate_weight,
    extract_by_weight,
)

CJK_40 = "一二三四五六七八九十" * 2  # 20个汉字，权重40


class TestVisualWeight(unittest.TestCase):
    """视觉权重测试"""

    def test_ascii_weight(self):
        self.assertEqual(calculate_weight("Hello"), 5)
        self.assertEqual(calculate_weight(""), 0)

    def test_cjk_weight(self):
        self.assertEqual(calculate_weight("你好"), 4)
        self.assertEqual(calculate_weight("こんにちは"), 10)
        self.assertEqual(calculate_weight("カタカナ"), 8)
        self.assertEqual(calculate_weight("안녕"), 4)
        self.assertEqual(calculate_weight(CJK_40), 40)

    def test_weight_is_additive(self):
        parts = ["Hello ", "世界", "", "ラブ", "!"]
        self.assertEqual(calculate_weight("".join(parts)), sum(calculate_weight(p) for p in parts))


class TestExtractByWeight(unittest.TestCase):
    """按权重截取测试"""

    def test_cjk_window(self):
        self.assertEqual(extract_by_weight("你好世界", 0, 4), "你好")
        self.assertEqual(extract_by_weight("你好世界", 2, 4), "好世")

    def test_backs_off_to_word_boundary(self):
        """测试不截断西文单词"""
        self.assertEqual(extract_by_weight("hello world again", 0, 8), "hello")

    def test_no_backoff_at_space(self):
        self.assertEqual(extract_by_weight("hello world", 0, 6), "hello")

    def test_single_long_word_is_cut(self):
        """测试没有空格可回退时直接截断"""
        self.assertEqual(extract_by_weight("abcdefghij", 0, 4), "abcd")

    def test_start_beyond_text(self):
        self.assertEqual(extract_by_weight("abc", 10, 4), "")

    def test_smart_shift(self):
        """测试中文移动2字，西文对齐到空格"""
        self.assertEqual(calculate_smart_shift_weight(CJK_40, 0), 4)
        self.assertEqual(calculate_smart_shift_weight("hey you all the time", 0), 4)
        self.assertEqual(calculate_smart_shift_weight("abcdefghijklmnop", 0), 3)
        self.assertEqual(calculate_smart_shift_weight("abc", 10), 4)


class TestScrollPacer(unittest.TestCase):
    """滚动状态机测试"""

    def setUp(self):
        self.pacer = ScrollPacer()

    def test_short_line_is_static(self):
        """测试容量内的行直接完成"""
        self.pacer.set_line("short line", 0)
        frame = self.pacer.render(0)
        self.assertEqual(frame.display_text, "short line")
        self.assertTrue(frame.is_static)
        self.assertEqual(self.pacer.state.phase, ScrollPhase.DONE)
        self.assertEqual(self.pacer.next_tick_delay(), DONE_TICK_DELAY)

    def test_initial_pause(self):
        """测试初始停顿期间显示首个窗口"""
        self.pacer.set_line(CJK_40, 0)
        frame = self.pacer.render(0)
        self.assertEqual(frame.display_text, CJK_40[:9])
        self.assertFalse(frame.is_static)

        self.pacer.render(999)
        self.assertEqual(self.pacer.state.phase, ScrollPhase.INITIAL_PAUSE)

        self.pacer.render(1000)
        self.assertEqual(self.pacer.state.phase, ScrollPhase.SCROLLING)
        self.assertEqual(self.pacer.state.offset_weight, 0)
        self.assertEqual(self.pacer.next_tick_delay(), DEFAULT_SCROLL_DELAY)

    def test_scroll_advance_is_time_gated(self):
        """测试滚动间隔未到时不移动"""
        self.pacer.set_line(CJK_40, 0)
        self.pacer.render(1000)
        self.pacer.render(1000 + DEFAULT_SCROLL_DELAY - 1)
        self.assertEqual(self.pacer.state.offset_weight, 0)

        frame = self.pacer.render(1000 + DEFAULT_SCROLL_DELAY)
        self.assertEqual(self.pacer.state.offset_weight, 4)
        self.assertEqual(frame.display_text, CJK_40[2:11])

    def run_until_done(self, pacer, text, step=100, limit=200):
        pacer.set_line(text, 0)
        frames = []
        offsets = []
        now = 0
        for _ in range(limit):
            frames.append(pacer.render(now))
            offsets.append(pacer.state.offset_weight)
            if pacer.state.phase == ScrollPhase.DONE:
                break
            now += step * 10
        return frames, offsets

    def test_long_line_reaches_done(self):
        """测试长行最终显示末尾并完成"""
        frames, _ = self.run_until_done(self.pacer, CJK_40)
        self.assertTrue(frames[-1].is_static)
        self.assertTrue(CJK_40.endswith(frames[-1].display_text))
        for frame in frames:
            self.assertLessEqual(calculate_weight(frame.display_text), self.pacer.max_display_weight)

    def test_compensation_stops_advancing(self):
        """测试剩余权重不超过阈值后不再移动"""
        pacer = ScrollPacer(max_display_weight=10)
        frames, offsets = self.run_until_done(pacer, CJK_40)

        total = calculate_weight(CJK_40)
        first_compensated = next(
            i for i, offset in enumerate(offsets) if total - offset <= COMPENSATION_THRESHOLD
        )
        self.assertTrue(all(offset == offsets[first_compensated] for offset in offsets[first_compensated:]))
        # 补偿后一次显示全部剩余内容
        self.assertEqual(frames[-1].display_text, CJK_40[offsets[-1] // 2:])

    def test_offset_is_monotonic(self):
        _, offsets = self.run_until_done(self.pacer, "the quick brown fox jumps over the lazy dog again")
        self.assertEqual(offsets, sorted(offsets))

    def test_set_line_resets_identical_text(self):
        """测试相同文本的新行也会重置滚动"""
        self.run_until_done(self.pacer, CJK_40)
        self.assertEqual(self.pacer.state.phase, ScrollPhase.DONE)

        self.pacer.set_line(CJK_40, 100000)
        self.assertEqual(self.pacer.state.phase, ScrollPhase.INITIAL_PAUSE)
        self.assertEqual(self.pacer.state.offset_weight, 0)


class TestAdaptivePacing(unittest.TestCase):
    """自适应滚动间隔测试"""

    def setUp(self):
        self.pacer = ScrollPacer()

    def change_line(self, text, now):
        self.pacer.record_line_change(text, now)
        self.pacer.set_line(text, now)

    def test_first_line_keeps_default(self):
        self.change_line("a" * 20, 0)
        self.assertEqual(self.pacer.adaptive_delay, DEFAULT_SCROLL_DELAY)
        self.assertEqual(self.pacer.history.samples(), [])

    def test_adaptive_delay_from_history(self):
        """测试根据上一行时长计算滚动间隔"""
        self.change_line("a" * 20, 0)
        self.change_line("b" * 20, 4000)
        # 4000 - 1500 - 4 * 500 = 500; 500 // 20 = 25; 500 + 25 * 5
        self.assertEqual(self.pacer.adaptive_delay, 625)
        self.assertEqual(self.pacer.next_tick_delay(), 625)

    def test_adaptive_delay_long_line(self):
        self.change_line("a" * 40, 0)
        self.change_line("b" * 40, 20000)
        # 20000 - 1500 - 8 * 500 = 14500; 14500 // 40 = 362; 500 + 362 * 5
        self.assertEqual(self.pacer.adaptive_delay, 2310)

    def test_short_average_uses_default(self):
        self.change_line("a" * 10, 0)
        self.change_line("b" * 10, 1000)
        self.assertEqual(self.pacer.history.samples(), [1000])
        self.assertEqual(self.pacer.adaptive_delay, DEFAULT_SCROLL_DELAY)

    def test_adaptive_delay_is_clamped(self):
        self.change_line("a", 0)
        self.change_line("b", 30000)
        self.assertEqual(self.pacer.adaptive_delay, MAX_SCROLL_DELAY)

    def test_reset_for_new_song(self):
        self.change_line("a" * 20, 0)
        self.change_line("b" * 20, 4000)
        self.pacer.reset_for_new_song()
        self.assertEqual(self.pacer.history.samples(), [])
        self.assertIsNone(self.pacer.history.last_change_time)
        self.assertEqual(self.pacer.adaptive_delay, DEFAULT_SCROLL_DELAY)


class TestPacingHistory(unittest.TestCase):
    """歌词行时长历史测试"""

    def test_noise_is_ignored(self):
        """测试过快的切换被忽略"""
        history = PacingHistory()
        history.record("a" * 20, 0)
        self.assertIsNone(history.record("b", 500))
        self.assertEqual(history.samples(), [])

    def test_long_gap_resets_tracking(self):
        """测试过长的间隔只重置计时"""
        history = PacingHistory()
        history.record("a", 0)
        self.assertIsNone(history.record("b", 40000))
        self.assertEqual(history.samples(), [])
        self.assertEqual(history.last_change_time, 40000)

    def test_bounded_window(self):
        """测试只保留最近5个样本"""
        history = PacingHistory()
        history.record("a" * 10, 0)
        for i in range(1, 8):
            history.record("a" * 10, i * 2000 + i)
        self.assertEqual(len(history.samples()), 5)
        self.assertEqual(history.average(), 2001)

    def test_average_empty(self):
        self.assertIsNone(PacingHistory().average())


class TestTimedWindows(unittest.TestCase):
    """逐字/进度时间窗口测试"""

    def setUp(self):
        self.pacer = ScrollPacer()

    def test_syllable_window_short_line(self):
        self.assertEqual(self.pacer.syllable_window("你好", "世界"), "你好世界")

    def test_syllable_window_before_threshold(self):
        """测试已唱部分较少时从行首显示"""
        self.assertEqual(
            self.pacer.syllable_window("一二", "三四五六七八九十一二三四五"),
            "一二三四五六七八九"
        )

    def test_syllable_window_scrolls_with_progress(self):
        self.assertEqual(
            self.pacer.syllable_window("一二三四五", "六七八九十一二三四五"),
            "二三四五六七八九十"
        )

    def test_lrc_progress_window(self):
        """测试LRC行进度前30%不滚动，结束时显示末尾"""
        line = LyricLine(start_time=0, end_time=10000, text=CJK_40)
        self.assertEqual(self.pacer.lrc_progress_window(line, 0), CJK_40[:9])
        self.assertEqual(self.pacer.lrc_progress_window(line, 2000), CJK_40[:9])
        self.assertEqual(self.pacer.lrc_progress_window(line, 10000), CJK_40[11:])

    def test_lrc_progress_window_short_line(self):
        line = LyricLine(start_time=0, end_time=1000, text="short")
        self.assertEqual(self.pacer.lrc_progress_window(line, 500), "short")


if __name__ == '__main__':
    unittest.main()
