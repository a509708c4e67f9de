"""
IslandLyrics - 在线歌词获取与同步显示引擎

并发请求多个在线歌词源，选择最佳结果，并按播放位置驱动逐行/逐字高亮与滚动显示。
"""

__version__ = "1.0.0"
