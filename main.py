#!/usr/bin/env python3
"""
IslandLyrics 歌词引擎 - 命令行演示入口

加载配置和日志，按标题/艺术家获取最佳歌词，并在控制台模拟播放刷新。
"""
import argparse
import asyncio
import logging
import time
from typing import List, Optional

from islandlyrics.core.context import LyricsContext
from islandlyrics.core.interfaces import SongQuery
from islandlyrics.lyrics.lyrics_manager import LyricsManager
from islandlyrics.lyrics.playback_driver import PlaybackDriver
from islandlyrics.utils.config_manager import ConfigManager
from islandlyrics.utils.logger import setup_logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="获取在线歌词并模拟同步显示")
    parser.add_argument("title", help="歌曲标题")
    parser.add_argument("artist", nargs="?", default="", help="艺术家")
    parser.add_argument("--duration", type=int, default=None, help="歌曲时长（毫秒）")
    parser.add_argument("--config", default="config/config.yaml", help="配置文件路径")
    parser.add_argument("--speed", type=float, default=1.0, help="模拟播放倍速")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, config: ConfigManager, logger: logging.Logger) -> int:
    context = LyricsContext.from_config(config)
    manager = LyricsManager(context)

    query = SongQuery(title=args.title, artist=args.artist, duration_hint=args.duration)
    outcome = await manager.request_lyrics(query)
    if outcome.result is None:
        logger.error(f"❌ 未找到歌词: {query.title} - {query.artist}")
        return 1

    result = outcome.result
    logger.info(f"✅ 使用歌词: {result.get_display_name()} (分数: {result.score})")

    driver = PlaybackDriver(context)
    driver.load(result)

    tick_interval = config.get_tick_interval()
    song_end = result.timeline[-1].end_time
    started = time.monotonic()
    last_text = None

    while True:
        position = int((time.monotonic() - started) * 1000 * args.speed)
        if position > song_end:
            break

        output = driver.tick(position)
        if output.display.display_text != last_text:
            last_text = output.display.display_text
            print(f"[{position // 60000:02d}:{position // 1000 % 60:02d}] {last_text}")

        await asyncio.sleep(tick_interval / 1000)

    return 0


def main() -> int:
    """
    命令行入口

    Returns:
        int: 退出代码（0表示成功，1表示错误）
    """
    args = parse_args()

    try:
        config = ConfigManager(args.config)
    except FileNotFoundError:
        # 没有配置文件时使用全部默认值
        config = ConfigManager.from_dict({})

    setup_logger(
        log_level=config.get_log_level(),
        log_file=config.get_log_file(),
        max_size=config.get_log_max_size(),
        backup_count=config.get_log_backup_count()
    )
    logger = logging.getLogger("islandlyrics")
    logger.debug(f"日志配置完成 - 级别: {config.get_log_level()}, 文件: {config.get_log_file()}")

    try:
        return asyncio.run(run(args, config, logger))
    except KeyboardInterrupt:
        logger.info("🛑 用户停止了播放模拟 (Ctrl+C)")
        return 0
    except Exception as e:
        logger.error(f"❌ 运行时发生意外错误: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    exit(main())
