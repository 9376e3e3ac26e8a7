import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import roomkeeper.main as main_module


def test_resolve_base_dir_prefers_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ROOMKEEPER_HOME", str(tmp_path))

    assert main_module.resolve_base_dir() == tmp_path.resolve()


def test_resolve_base_dir_defaults_to_project_root(monkeypatch) -> None:
    monkeypatch.delenv("ROOMKEEPER_HOME", raising=False)

    assert main_module.resolve_base_dir() == Path(main_module.__file__).resolve().parents[2]


def test_load_environment_requires_credentials(monkeypatch) -> None:
    monkeypatch.delenv("HIGHRISE_API_TOKEN", raising=False)
    monkeypatch.setenv("HIGHRISE_ROOM_ID", "room")
    with patch.object(main_module, "load_dotenv"), pytest.raises(SystemExit):
        main_module.load_environment()


def test_load_environment_returns_credentials(monkeypatch) -> None:
    monkeypatch.setenv("HIGHRISE_API_TOKEN", "token")
    monkeypatch.setenv("HIGHRISE_ROOM_ID", "room")
    with patch.object(main_module, "load_dotenv"):
        assert main_module.load_environment() == ("token", "room")


@pytest.mark.asyncio
async def test_async_main_runs_and_shuts_down() -> None:
    bot = MagicMock()
    bot.state.shutdown = AsyncMock()
    with patch.object(main_module, "load_environment", return_value=("token", "room")), \
            patch.object(main_module, "AppConfig"), \
            patch("roomkeeper.bot.room_bot.RoomBot", return_value=bot), \
            patch.object(main_module, "BotDefinition") as definition, \
            patch.object(main_module, "run_highrise", new=AsyncMock()) as run:
        code = await main_module.async_main()

    assert code == 0
    definition.assert_called_once_with(bot, "room", "token")
    run.assert_awaited_once_with([definition.return_value])
    bot.state.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_main_reports_runtime_error() -> None:
    bot = MagicMock()
    bot.state.shutdown = AsyncMock()
    with patch.object(main_module, "load_environment", return_value=("token", "room")), \
            patch.object(main_module, "AppConfig"), \
            patch("roomkeeper.bot.room_bot.RoomBot", return_value=bot), \
            patch.object(main_module, "BotDefinition"), \
            patch.object(main_module, "run_highrise", new=AsyncMock(side_effect=RuntimeError("down"))):
        code = await main_module.async_main()

    assert code == 1
    bot.state.shutdown.assert_awaited_once()


@pytest.mark.parametrize(
    "outcome, expected",
    [(0, 0), (KeyboardInterrupt(), 0), (SystemExit(3), 3), (SystemExit("bad"), 1), (RuntimeError("x"), 1)],
)
def test_main_exit_codes(outcome, expected) -> None:
    run = MagicMock(side_effect=outcome) if isinstance(outcome, BaseException) else MagicMock(return_value=outcome)
    with patch.object(main_module, "async_main", new=MagicMock()), \
            patch.object(main_module.asyncio, "run", new=run), \
            patch.object(main_module.os, "chdir"), \
            patch.object(sys, "excepthook"):
        assert main_module.main() == expected


@pytest.mark.asyncio
async def test_async_main_reads_config_under_base_dir() -> None:
    bot = MagicMock()
    bot.state.shutdown = AsyncMock()
    with patch.object(main_module, "load_environment", return_value=("token", "room")), \
            patch.object(main_module, "AppConfig") as config_cls, \
            patch("roomkeeper.bot.room_bot.RoomBot", return_value=bot), \
            patch.object(main_module, "BotDefinition"), \
            patch.object(main_module, "run_highrise", new=AsyncMock()):
        await main_module.async_main()

    config_cls.assert_called_once_with(main_module.BASE_DIR / "config" / "app_config.yml")
