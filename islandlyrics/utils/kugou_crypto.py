"""
酷狗歌词解密模块

酷狗下发的KRC逐字歌词经过以下处理：
- 4字节文件头（"krc1"）
- 固定16字节密钥循环异或
- zlib 压缩
- base64 编码

解码失败时原样返回输入，由调用方重新校验格式。
"""

import base64
import binascii
import logging
import zlib
from typing import Optional

from islandlyrics.core.interfaces import DecodeFailure


# 酷狗KRC异或密钥（必须逐位一致）
KRC_XOR_KEY = bytes([
    0x40, 0x47, 0x61, 0x77, 0x5E, 0x32, 0x74, 0x47,
    0x51, 0x36, 0x31, 0x2D, 0xCE, 0xD2, 0x6E, 0x69,
])

KRC_HEADER = b"krc1"
KRC_HEADER_SIZE = 4

# 解码结果首字符由提供者附加（实际观测为 U+FEFF），解码时丢弃
KRC_LEADING_CHAR = "\ufeff"


class KugouCrypto:
    """酷狗歌词加解密工具类"""

    def __init__(self):
        self.logger = logging.getLogger("islandlyrics.utils.kugou_crypto")

    @staticmethod
    def xor_bytes(data: bytes) -> bytes:
        """使用KRC密钥循环异或（加密与解密是同一操作）"""
        key_size = len(KRC_XOR_KEY)
        return bytes(b ^ KRC_XOR_KEY[i % key_size] for i, b in enumerate(data))

    @staticmethod
    def inflate(data: bytes) -> bytes:
        """
        解压数据，直到流结束或输入耗尽

        优先按 zlib 封装格式解压，失败后按无头的原始 DEFLATE 流解压。
        截断的流返回已解压的部分，不视为错误。

        Raises:
            zlib.error: 两种格式均无法解压
        """
        last_error: Optional[zlib.error] = None
        for wbits in (zlib.MAX_WBITS, -zlib.MAX_WBITS):
            inflater = zlib.decompressobj(wbits)
            try:
                return inflater.decompress(data) + inflater.flush()
            except zlib.error as e:
                last_error = e
        raise last_error

    def decode_lyric(self, encoded: str) -> str:
        """
        解码酷狗歌词内容

        Args:
            encoded: base64编码的加密歌词

        Returns:
            解码后的歌词文本；任一步骤失败时返回原始输入
        """
        try:
            data = base64.b64decode(encoded)
            if len(data) <= KRC_HEADER_SIZE:
                raise DecodeFailure(f"数据长度不足: {len(data)} 字节")
            decrypted = self.xor_bytes(data[KRC_HEADER_SIZE:])
            result = self.inflate(decrypted).decode('utf-8')
            return result[1:] if result else result
        except (binascii.Error, ValueError, zlib.error, DecodeFailure) as e:
            self.logger.warning(f"酷狗歌词解密失败: {e}")
            return encoded

    def encode_lyric(self, text: str) -> str:
        """
        按酷狗格式编码歌词（decode_lyric 的逆操作）

        Args:
            text: 歌词明文

        Returns:
            base64编码的加密歌词
        """
        compressed = zlib.compress((KRC_LEADING_CHAR + text).encode('utf-8'))
        payload = KRC_HEADER + self.xor_bytes(compressed)
        return base64.b64encode(payload).decode('ascii')


# 全局加密实例
_crypto_instance = None


def get_crypto() -> KugouCrypto:
    """获取全局加密实例"""
    global _crypto_instance
    if _crypto_instance is None:
        _crypto_instance = KugouCrypto()
    return _crypto_instance


def decode_lyric(encoded: str) -> str:
    """酷狗歌词解码便捷函数"""
    return get_crypto().decode_lyric(encoded)


def encode_lyric(text: str) -> str:
    """酷狗歌词编码便捷函数"""
    return get_crypto().encode_lyric(text)
