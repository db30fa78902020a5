# lingua_sync/_keys/derive.py
from __future__ import annotations

import hashlib

from lingua_sync.core.exceptions import InvalidLocaleError

# 8 字节摘要 -> 16 位小写十六进制
DIGEST_SIZE = 8
# 语言标记插入的位置
LOCALE_OFFSET = 2


def _locale_tag(locale: str) -> str:
    """校验语言代码并返回其大写的两字母标记。"""
    if not isinstance(locale, str):
        raise InvalidLocaleError(f"语言代码必须是字符串，得到 {type(locale).__name__}")
    stripped = locale.strip()
    head = stripped[:LOCALE_OFFSET]
    if len(stripped) < 2 or not (head.isascii() and head.isalpha()):
        raise InvalidLocaleError(f"提供的语言代码 '{locale}' 格式无效。")
    return head.upper()


def normalize_locale(locale: str) -> str:
    """
    将语言代码规范化为 BCP 47 的常见书写形式。

    'EN_us' -> 'en-US', 'zh_hant' -> 'zh-Hant'。空字符串原样返回。
    """
    parts = [p for p in locale.strip().replace("_", "-").split("-") if p]
    if not parts:
        return ""
    normalized = [parts[0].lower()]
    for part in parts[1:]:
        if len(part) == 2 and part.isalpha():
            normalized.append(part.upper())
        elif len(part) == 4 and part.isalpha():
            normalized.append(part.title())
        else:
            normalized.append(part)
    return "-".join(normalized)


def source_key(text: str, locale: str) -> str:
    """
    计算 (文本, 语言) 的确定性内容键。

    键 = BLAKE2b-64(text) 的十六进制串，在固定偏移处插入大写的两字母语言标记。
    十六进制字符均为小写，因此插入的标记总能区分语言：
    source_key(t, "en") != source_key(t, "es")。

    Args:
        text: 原文。
        locale: 语言代码，至少两个字母。

    Returns:
        18 个字符的内容键。

    Raises:
        InvalidLocaleError: 语言代码不足两个字母。
    """
    tag = _locale_tag(locale)
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=DIGEST_SIZE).hexdigest()
    return digest[:LOCALE_OFFSET] + tag + digest[LOCALE_OFFSET:]


def translation_key(
    source_key: str, target_locale: str, engine: str | None = None
) -> str:
    """
    组合出某个源键在某目标语言（及可选引擎）下的本地键。

    引擎通常省略，因为每行的 engine 列已经足以区分。
    """
    _locale_tag(target_locale)
    parts = [source_key, target_locale]
    if engine:
        parts.append(engine)
    return "|".join(parts)
