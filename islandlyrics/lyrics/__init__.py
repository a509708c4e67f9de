"""
歌词模块 - 歌词解析、结果选择和同步显示

提供LRC/KRC格式解析、多源结果评分、时间轴定位和滚动显示等功能。
"""

from .lyrics_parser import parse_krc, parse_lrc, parse_lyrics
from .timeline_cursor import CursorFrame, TimelineCursor
from .scroll_pacer import DisplayFrame, ScrollPacer, calculate_weight, extract_by_weight
from .result_selector import LyricsResultSelector, score_result, select_best
from .lyrics_manager import LyricsFetchOutcome, LyricsManager
from .playback_driver import PlaybackDriver, TickOutput

__all__ = [
    'parse_krc',
    'parse_lrc',
    'parse_lyrics',
    'CursorFrame',
    'TimelineCursor',
    'DisplayFrame',
    'ScrollPacer',
    'calculate_weight',
    'extract_by_weight',
    'LyricsResultSelector',
    'score_result',
    'select_best',
    'LyricsFetchOutcome',
    'LyricsManager',
    'PlaybackDriver',
    'TickOutput',
]
