"""
内容寻址键 (Content Key) 模块。

本模块是 (文本, 语言) 身份的唯一真理源：客户端与远端服务各自独立计算，
必须得到逐位一致的结果。
"""

from .derive import normalize_locale, source_key, translation_key

__all__ = ["normalize_locale", "source_key", "translation_key"]
