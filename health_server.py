from aiohttp import web
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Track bot start time for uptime reporting
_START_TIME = datetime.now(timezone.utc)


def build_health_app(bot) -> web.Application:
    app = web.Application()

    async def handle_root(request):
        """Root endpoint - simple OK response"""
        return web.Response(text='OK', content_type='text/plain')

    async def handle_health(request):
        """Health check endpoint.

        Container hosts poll this; it must answer quickly, so it only reads
        in-memory state from the bot.
        """
        now = datetime.now(timezone.utc)
        uptime_seconds = (now - _START_TIME).total_seconds()
        ready = bot.is_ready()

        resp = {
            'status': 'healthy' if ready else 'starting',
            'ready': ready,
            'uptime_seconds': int(uptime_seconds),
            'guilds': len(bot.guilds) if ready else 0,
            'timestamp': now.isoformat(),
        }

        logger.debug(f"Health check: {resp['status']} (uptime: {int(uptime_seconds)}s)")
        return web.json_response(resp)

    app.add_routes([
        web.get('/', handle_root),
        web.get('/health', handle_health),
    ])
    return app


async def start_health_server(bot, port: int) -> Optional[web.AppRunner]:
    """Start a lightweight HTTP server for health checks.

    Returns the runner on success, or None if the server could not be started
    (for example, because the port is already in use).
    """
    runner = web.AppRunner(build_health_app(bot))
    await runner.setup()
    site = web.TCPSite(runner, '0.0.0.0', port)
    try:
        await site.start()
    except OSError as e:
        # Port likely in use; log and return None so caller can continue
        logger.warning(f"Health server could not bind to 0.0.0.0:{port}: {e}")
        await runner.cleanup()
        return None

    logger.info(f'Health server started on port {port}')
    logger.info(f'  - Health check: http://0.0.0.0:{port}/health')
    return runner
