# tests/unit/test_keys.py
"""针对 `lingua_sync._keys` 内容键派生的单元测试。"""

import hashlib
import os
import subprocess
import sys
from pathlib import Path

import pytest

import lingua_sync
from lingua_sync._keys import normalize_locale, source_key, translation_key
from lingua_sync.core.exceptions import InvalidLocaleError


def test_source_key_shape() -> None:
    """键由 16 位小写十六进制和插入在偏移 2 处的大写语言标记组成。"""
    key = source_key("Hello", "en")
    digest = hashlib.blake2b(b"Hello", digest_size=8).hexdigest()
    assert len(key) == 18
    assert key == digest[:2] + "EN" + digest[2:]


def test_source_key_is_deterministic() -> None:
    assert source_key("Save", "en") == source_key("Save", "en")


def test_source_key_is_stable_across_processes() -> None:
    """键不依赖 hash() 的随机化，在独立进程中结果相同。"""
    code = "from lingua_sync._keys import source_key; print(source_key('Save', 'en'))"
    root = Path(lingua_sync.__file__).resolve().parent.parent
    env = {**os.environ, "PYTHONPATH": str(root), "PYTHONHASHSEED": "random"}
    out = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, check=True, env=env
    )
    assert out.stdout.strip() == source_key("Save", "en")


@pytest.mark.parametrize(
    "left, right",
    [
        (("Save", "en"), ("Save", "es")),
        (("Save", "en"), ("save", "en")),
        (("Save", "en"), ("Save ", "en")),
    ],
)
def test_source_key_discriminates_inputs(
    left: tuple[str, str], right: tuple[str, str]
) -> None:
    assert source_key(*left) != source_key(*right)


def test_source_key_uses_only_language_prefix() -> None:
    """只取语言代码前两个字母：同一语言的不同地区共享同一个键。"""
    assert source_key("Color", "en-US") == source_key("Color", "en-GB")
    assert source_key("Color", "en") == source_key("Color", "EN")


def test_source_key_handles_unicode_text() -> None:
    key = source_key("你好，世界", "zh-Hans")
    assert key[2:4] == "ZH"
    assert key == source_key("你好，世界", "zh")


@pytest.mark.parametrize("bad_locale", ["", " ", "e", "1a", "-en", " e "])
def test_source_key_rejects_invalid_locale(bad_locale: str) -> None:
    with pytest.raises(InvalidLocaleError):
        source_key("Hello", bad_locale)


def test_invalid_locale_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        source_key("Hello", "x")


def test_translation_key_composition() -> None:
    key = source_key("Hello", "en")
    assert translation_key(key, "es") == f"{key}|es"
    assert translation_key(key, "es", "deepl") == f"{key}|es|deepl"


def test_translation_key_validates_target_locale() -> None:
    with pytest.raises(InvalidLocaleError):
        translation_key("abc", "9")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("EN_us", "en-US"),
        ("zh_hant", "zh-Hant"),
        (" fr-ca ", "fr-CA"),
        ("es-419", "es-419"),
        ("", ""),
    ],
)
def test_normalize_locale(raw: str, expected: str) -> None:
    assert normalize_locale(raw) == expected
