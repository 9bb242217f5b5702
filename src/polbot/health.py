"""HTTP liveness endpoint for the hosting platform."""
import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger(__name__)

HEALTH_TEXT = "Bot is running dynamic cycles! 🇵🇱"


async def ok_handler(_: web.Request) -> web.Response:
    return web.Response(text=HEALTH_TEXT)


def create_health_app() -> web.Application:
    app = web.Application()
    app.add_routes([web.get("/", ok_handler)])
    return app


class HealthServer:
    """Serves GET / with a static string on the given port."""

    def __init__(self, port: int = 3000, host: str = "0.0.0.0"):
        self.port = port
        self.host = host
        self.runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        self.runner = web.AppRunner(create_health_app())
        await self.runner.setup()
        site = web.TCPSite(self.runner, host=self.host, port=self.port)
        await site.start()
        logger.info("Health server on port %d", self.port)

    async def stop(self) -> None:
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
