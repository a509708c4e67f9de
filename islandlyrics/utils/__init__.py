"""工具模块 - 配置、日志、HTTP请求、酷狗解密和文本处理"""
