"""Entry point for the graduation radar."""

import asyncio
import signal

from loguru import logger

from config.settings import settings
from src.parsers.worker import run_radar
from src.utils.logger import setup_logger


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level, log_dir=settings.log_dir)
    mode = "live" if settings.ws_url else "cache-only"
    logger.info(
        f"Starting graduation radar ({mode}, program {settings.graduation_program_id[:8]}...)"
    )

    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()

    def _on_signal(signame: str) -> None:
        logger.info(f"{signame} received, shutting down")
        stop_requested.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, sig.name)

    radar = asyncio.create_task(run_radar(), name="radar")
    waiter = asyncio.create_task(stop_requested.wait(), name="signal")
    await asyncio.wait([radar, waiter], return_when=asyncio.FIRST_COMPLETED)

    # run_radar's finally block stops the stream and closes the HTTP clients
    for task in (radar, waiter):
        if task.done():
            continue
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    if radar.done() and not radar.cancelled() and radar.exception() is not None:
        logger.opt(exception=radar.exception()).error("Radar crashed")
    logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
