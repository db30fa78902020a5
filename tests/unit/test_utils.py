# tests/unit/test_utils.py
"""针对 `lingua_sync.utils` 模块的单元测试。"""

import pytest

from lingua_sync.utils import parse_targets, validate_lang_codes


@pytest.mark.parametrize(
    "valid_codes",
    [["en"], ["zh-CN"], ["de", "fr", "es-419"], ["EN"], ["en_GB"], ["zh-Hant"]],
)
def test_validate_lang_codes_accepts_valid_tags(valid_codes: list[str]) -> None:
    """测试有效的和可标准化的语言代码都能通过校验，不引发异常。"""
    try:
        validate_lang_codes(valid_codes)
    except ValueError as e:
        pytest.fail(f"validate_lang_codes() 错误地对有效代码 {valid_codes} 引发了异常: {e}")


@pytest.mark.parametrize("invalid_code", ["german", "e", "123", "a-DE"])
def test_validate_lang_codes_rejects_invalid_tags(invalid_code: str) -> None:
    with pytest.raises(ValueError) as excinfo:
        validate_lang_codes([invalid_code])
    assert f"提供的语言代码 '{invalid_code}' 格式无效" in str(excinfo.value)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, []),
        ("", []),
        ("es", ["es"]),
        ("fr, es  fr", ["fr", "es"]),
        (["es,fr", "de"], ["es", "fr", "de"]),
        ((" it ",), ["it"]),
        ("pt_br, PT-BR zh_hant", ["pt-BR", "zh-Hant"]),
    ],
)
def test_parse_targets(raw: object, expected: list[str]) -> None:
    assert parse_targets(raw) == expected  # type: ignore[arg-type]
