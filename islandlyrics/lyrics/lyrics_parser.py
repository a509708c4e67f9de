"""LRC / KRC 格式歌词解析器"""

import logging
import re
from typing import List, Optional, Tuple

from islandlyrics.core.interfaces import LyricLine, SyllableInfo

logger = logging.getLogger("islandlyrics.lyrics.lyrics_parser")

# 最后一行没有后继时的默认时长（毫秒）
DEFAULT_LAST_LINE_DURATION = 5000

# LRC时间戳模式: [mm:ss.xx] 或 [mm:ss.xxx]
LRC_TIMESTAMP_PATTERN = re.compile(r'\[(\d{2}):(\d{2})\.(\d{2,3})\]')

# KRC行头 [offset,duration] 与逐字 <offset,duration,id>text
KRC_HEADER_PATTERN = re.compile(r'^\[(\d+),(\d+)\]')
KRC_SYLLABLE_PATTERN = re.compile(r'<(\d+),(\d+),(\d+)>([^<]*)')

# 评分用：任意可识别的时间标签
TIMESTAMP_TAG_PATTERN = re.compile(r'\[\d{1,2}[.:]\d{1,2}[.:]\d{1,3}]')


def looks_like_krc(text: str) -> bool:
    """
    判断歌词正文是否为KRC逐字格式

    只检查是否同时包含 '<' 和 '>'，是启发式判断而非严格语法检查。
    """
    return bool(text) and '<' in text and '>' in text


def has_timestamp_tags(text: Optional[str]) -> bool:
    """检查文本中是否存在可识别的时间标签"""
    return bool(text) and TIMESTAMP_TAG_PATTERN.search(text) is not None


def parse_lrc(lrc_content: str) -> List[LyricLine]:
    """
    将LRC格式歌词解析为时间轴

    一行包含多个时间标签时（副歌重复的常见写法），每个标签生成一行相同文本。

    Args:
        lrc_content: LRC格式歌词内容

    Returns:
        按开始时间排序的LyricLine列表，不含逐字信息
    """
    if not lrc_content or not lrc_content.strip():
        return []

    timed_lines: List[Tuple[int, str]] = []

    for line in lrc_content.splitlines():
        matches = LRC_TIMESTAMP_PATTERN.findall(line)
        if not matches:
            continue

        text = LRC_TIMESTAMP_PATTERN.sub('', line).strip()
        for minutes, seconds, fraction in matches:
            # 两位小数为百分之一秒
            millis = int(fraction) * 10 if len(fraction) == 2 else int(fraction)
            total_ms = int(minutes) * 60000 + int(seconds) * 1000 + millis
            timed_lines.append((total_ms, text))

    timed_lines.sort(key=lambda pair: pair[0])
    timed_lines = _drop_duplicate_starts(timed_lines)

    lines = []
    for i, (start_time, text) in enumerate(timed_lines):
        if i < len(timed_lines) - 1:
            end_time = timed_lines[i + 1][0]
        else:
            end_time = start_time + DEFAULT_LAST_LINE_DURATION
        lines.append(LyricLine(start_time=start_time, end_time=end_time, text=text))

    logger.debug(f"解析了 {len(lines)} 行LRC歌词")
    return lines


def _drop_duplicate_starts(timed_lines: List[Tuple[int, str]]) -> List[Tuple[int, str]]:
    """保留同一开始时间的第一行（排序是稳定的，即源顺序中的第一行）"""
    result: List[Tuple[int, str]] = []
    for start_time, text in timed_lines:
        if result and result[-1][0] == start_time:
            logger.debug(f"忽略重复时间戳的歌词行: {start_time}ms {text}")
            continue
        result.append((start_time, text))
    return result


def parse_krc_line(line: str) -> Optional[LyricLine]:
    """
    解析单行KRC歌词

    Args:
        line: 形如 "[1000,2000]<0,500,0>Hel<500,500,0>lo" 的行

    Returns:
        LyricLine，无法解析或没有逐字信息时返回None
    """
    header_match = KRC_HEADER_PATTERN.match(line)
    if not header_match:
        return None

    line_start = int(header_match.group(1))
    line_end = line_start + int(header_match.group(2))
    if line_end <= line_start:
        return None

    syllables = []
    text_parts = []
    for match in KRC_SYLLABLE_PATTERN.finditer(line, header_match.end()):
        abs_start = line_start + int(match.group(1))
        abs_end = abs_start + int(match.group(2))
        text = match.group(4)
        syllables.append(SyllableInfo(start_time=abs_start, end_time=abs_end, text=text))
        text_parts.append(text)

    if not syllables:
        return None

    return LyricLine(
        start_time=line_start,
        end_time=line_end,
        text="".join(text_parts),
        syllables=tuple(syllables)
    )


def parse_krc(krc_content: str) -> List[LyricLine]:
    """
    将KRC逐字歌词解析为时间轴

    逐字的偏移相对于行开始时间，按源顺序解析（假定源顺序即时间顺序）。
    没有逐字信息的行被视为噪声丢弃。

    Args:
        krc_content: KRC格式歌词内容

    Returns:
        按开始时间排序的LyricLine列表
    """
    if not krc_content:
        return []

    lines: List[LyricLine] = []
    for raw_line in krc_content.splitlines():
        raw_line = raw_line.strip()
        if len(raw_line) < 5 or not raw_line.startswith('[') or not raw_line[1].isdigit():
            continue

        parsed = parse_krc_line(raw_line)
        if parsed is None:
            logger.debug(f"跳过无法解析的KRC行: {raw_line[:50]}")
            continue
        lines.append(parsed)

    lines.sort(key=lambda line: line.start_time)

    timeline: List[LyricLine] = []
    for line in lines:
        if timeline and timeline[-1].start_time == line.start_time:
            continue
        timeline.append(line)

    logger.debug(f"解析了 {len(timeline)} 行KRC歌词")
    return timeline


def parse_lyrics(content: str) -> Tuple[List[LyricLine], bool]:
    """
    按格式检测结果解析歌词正文

    Args:
        content: 歌词正文

    Returns:
        (时间轴, 是否为逐字歌词)
    """
    if looks_like_krc(content):
        return parse_krc(content), True
    return parse_lrc(content), False
