"""
文本工具 - 标题清理与纯音乐识别

供结果评分和标题清理重试共用。
"""

import re

# 纯音乐 / 无歌词的常见表述
INSTRUMENTAL_PATTERN = re.compile(r'纯音乐|Instrumental|No lyrics|请欣赏|没有歌词', re.IGNORECASE)

# 评分时整篇正文只匹配这两种声明
NO_LYRICS_MARKERS = ("纯音乐", "No lyrics")

# 清理标题时移除的常见后缀（整词匹配，不区分大小写）
TITLE_NOISE_TOKENS = ["feat.", "ft.", "remix", "version", "live", "cover", "radio edit", "mix"]

_BRACKET_PATTERNS = [
    re.compile(r'\(.*?\)'),
    re.compile(r'\[.*?\]'),
]

_TOKEN_PATTERNS = [
    re.compile(r'(?<!\w)' + re.escape(token) + (r'(?!\w)' if token[-1].isalnum() else ''), re.IGNORECASE)
    for token in TITLE_NOISE_TOKENS
]


def clean_title(title: str) -> str:
    """
    清理歌曲标题：移除括号内容、Remix、Feat 等干扰词

    Args:
        title: 原始标题

    Returns:
        清理并压缩空白后的标题
    """
    if not title:
        return ""

    cleaned = title
    for pattern in _BRACKET_PATTERNS:
        cleaned = pattern.sub(' ', cleaned)

    for pattern in _TOKEN_PATTERNS:
        cleaned = pattern.sub(' ', cleaned)

    return re.sub(r'\s+', ' ', cleaned).strip()


def is_instrumental_text(text: str) -> bool:
    """
    检查歌词文本是否声明为纯音乐或无歌词

    Args:
        text: 歌词文本或单行歌词

    Returns:
        如果匹配已知的纯音乐表述则返回True
    """
    if not text:
        return False
    return INSTRUMENTAL_PATTERN.search(text) is not None


def declares_no_lyrics(body: str) -> bool:
    """
    检查整篇歌词正文是否声明为纯音乐或无歌词

    与 is_instrumental_text 不同，只匹配少数明确的声明，
    避免间奏提示行误伤正常歌词。
    """
    if not body:
        return False
    return any(marker in body for marker in NO_LYRICS_MARKERS)
