"""
Highrise Room Keeper
====================

A Highrise bot that runs permission-gated chat commands (teleports, emotes,
moderation, outfit and wallet actions), keeps a persisted moderation ledger
and enforces frozen positions in a single room.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.
    Resolution order:
    1. ROOMKEEPER_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("ROOMKEEPER_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()

import asyncio
from dotenv import load_dotenv
from highrise.__main__ import BotDefinition, main as run_highrise

from roomkeeper.configuration.app_configuration import AppConfig
from roomkeeper.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> tuple[str, str]:
    """Load ``.env`` from the base directory and return ``(api_token, room_id)``.

    Raises
    ------
    SystemExit
        If either ``HIGHRISE_API_TOKEN`` or ``HIGHRISE_ROOM_ID`` is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("HIGHRISE_API_TOKEN")
    room_id = os.getenv("HIGHRISE_ROOM_ID")
    if not token or not room_id:
        logger.critical("'HIGHRISE_API_TOKEN' and 'HIGHRISE_ROOM_ID' must be set. Bot cannot start.")
        sys.exit(1)
    return token, room_id


async def async_main() -> int:
    """Build the bot from configuration and run it until the connection ends.

    Returns
    -------
    int
        Process exit code reflecting success or failure.
    """
    from roomkeeper.bot.room_bot import RoomBot

    token, room_id = load_environment()
    config = AppConfig(BASE_DIR / "config" / "app_config.yml")

    try:
        bot = RoomBot(config, room_id)
    except Exception as exc:
        logger.critical("Failed to initialize bot: %s", exc)
        return 1

    exit_code = 0
    logger.info("Attempting to connect to room %s…", room_id)
    try:
        await run_highrise([BotDefinition(bot, room_id, token)])
    except asyncio.CancelledError:
        logger.info("Bot run cancelled; shutting down")
    except Exception as exc:
        logger.critical("Highrise runtime error: %s", exc)
        exit_code = 1
    finally:
        await bot.state.shutdown()
        logger.info("Shutdown complete.")
    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process code."""
    sys.excepthook = handle_exception
    os.chdir(BASE_DIR)
    logger.info("Starting Highrise Room Keeper…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
