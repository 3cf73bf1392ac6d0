"""
Process entry: configuration failures map to exit status 1.
"""

import pytest

import main_asyncio
from models.enums import ExitCode


@pytest.fixture
def no_runtime_api(monkeypatch):
    monkeypatch.delenv("AWS_LAMBDA_RUNTIME_API", raising=False)


@pytest.mark.asyncio
async def test_main_without_runtime_api_is_fatal(no_runtime_api):
    assert await main_asyncio.main() is ExitCode.FATAL


def test_run_exits_with_status_1_without_runtime_api(no_runtime_api):
    with pytest.raises(SystemExit) as exc_info:
        main_asyncio.run()

    assert exc_info.value.code == 1


def test_run_exits_with_event_loop_exit_code(monkeypatch):
    async def fake_main():
        return ExitCode.OK

    monkeypatch.setattr(main_asyncio, "main", fake_main)

    with pytest.raises(SystemExit) as exc_info:
        main_asyncio.run()

    assert exc_info.value.code == 0
