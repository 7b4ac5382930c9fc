"""Application entry point."""

from __future__ import annotations

import asyncio
from collections import defaultdict

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from teambot.config import get_settings
from teambot.handlers import entities_router, registration_router
from teambot.logging import configure_logging, get_logger
from teambot.services.registration_api import RegistrationApiClient, RegistrationSubmitter


logger = get_logger(__name__)


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    bot = Bot(token=settings.bot_token)
    dp = Dispatcher(storage=MemoryStorage())

    api_client = RegistrationApiClient(
        base_url=settings.api_end_point,
        timeout=settings.request_timeout,
        attempts=settings.submit_attempts,
    )

    bot_data = {
        "admin_chat_id": settings.admin_chat_id,
        "submitter": RegistrationSubmitter(api_client),
        "submit_locks": defaultdict(asyncio.Lock),
        "settings": settings,
    }

    # Handlers receive it as the ``bot_data`` argument.
    dp["bot_data"] = bot_data
    dp.include_router(registration_router)
    dp.include_router(entities_router)

    async def on_startup_handler() -> None:
        logger.info("bot_startup", api_end_point=settings.api_end_point)

    async def on_shutdown_handler() -> None:
        logger.info("bot_shutdown")
        await api_client.close()

    dp.startup.register(on_startup_handler)
    dp.shutdown.register(on_shutdown_handler)

    logger.info("bot_polling_start")
    try:
        await dp.start_polling(bot)
    finally:
        await api_client.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
