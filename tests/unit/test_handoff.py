# tests/unit/test_handoff.py
"""针对 `lingua_sync.handoff` 的单元测试。"""

import sys

import pytest

from lingua_sync.handoff import build_handoff_argv, run_handoff


def test_build_argv_appends_threshold() -> None:
    assert build_handoff_argv("bin/console meili:populate --all", 80) == [
        "bin/console",
        "meili:populate",
        "--all",
        "--translation-threshold=80",
    ]


def test_build_argv_without_threshold() -> None:
    assert build_handoff_argv("'my tool' run") == ["my tool", "run"]


def test_build_argv_rejects_empty_command() -> None:
    with pytest.raises(ValueError):
        build_handoff_argv("   ")


@pytest.mark.asyncio
@pytest.mark.parametrize("exit_code", [0, 3])
async def test_run_handoff_returns_exit_code(exit_code: int) -> None:
    command = f'"{sys.executable}" -c "import sys; sys.exit({exit_code})"'
    assert await run_handoff(command) == exit_code


@pytest.mark.asyncio
async def test_run_handoff_missing_executable() -> None:
    assert await run_handoff("definitely-not-a-real-command-xyz") == 127
