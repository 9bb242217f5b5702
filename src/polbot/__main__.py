"""Main entry point for the bot."""
import asyncio
import logging
import signal

from polbot.app import PolBot
from polbot.logging_config import setup_logging

logger = logging.getLogger("polbot")


async def shutdown(sig: signal.Signals, stop_event: asyncio.Event) -> None:
    """Ask the main coroutine to stop."""
    print()  # Print newline before logging
    logger.info(f"Received exit signal {sig.name}...")
    stop_event.set()


def handle_exception(loop, context):
    """Handle exceptions in the event loop."""
    msg = context.get("exception", context["message"])
    logger.error(f"Caught exception: {msg}")


async def main() -> None:
    """Run the bot."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    # Add signal handlers
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(shutdown(s, stop_event)))

    # Set exception handler
    loop.set_exception_handler(handle_exception)

    bot = PolBot()
    logger.info("Starting bot...")
    await bot.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("Cleaning up...")
        await bot.stop()


def run() -> None:
    setup_logging("Starting PolBot ...")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    run()
