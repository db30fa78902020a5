# lingua_sync/utils.py
"""
本模块包含项目范围内的通用工具函数。
语言代码校验采用 langcodes 库。
"""

import re
from collections.abc import Iterable
from typing import Union

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

from lingua_sync._keys import normalize_locale

# 语言子标签应该由 2-3 个字母组成 (BCP 47)
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}$")
TARGET_SEPARATOR = re.compile(r"[,\s]+")


def validate_lang_codes(lang_codes: Iterable[str]) -> None:
    """使用 `langcodes` 库校验语言代码列表中的每个代码是否符合 BCP 47 规范。"""
    for code in lang_codes:
        try:
            lang = Language.get(code)
            if not lang.language or not LANGUAGE_SUBTAG_PATTERN.match(lang.language):
                raise LanguageTagError(
                    f"Tag '{code}' lacks a valid 2-3 letter language subtag."
                )
        except LanguageTagError as e:
            raise ValueError(f"提供的语言代码 '{code}' 格式无效。原因: {e}") from e


def parse_targets(targets: Union[str, Iterable[str], None]) -> list[str]:
    """
    解析以逗号或空白分隔的目标语言列表，规范化书写形式，去除空项并按首次出现的顺序去重。

    'fr, es  fr' -> ['fr', 'es']；'pt_br' -> ['pt-BR']
    """
    if targets is None:
        return []
    if isinstance(targets, str):
        parts: Iterable[str] = TARGET_SEPARATOR.split(targets)
    else:
        parts = (p for t in targets for p in TARGET_SEPARATOR.split(t))
    seen: dict[str, None] = {}
    for part in parts:
        part = normalize_locale(part)
        if part:
            seen.setdefault(part, None)
    return list(seen)
