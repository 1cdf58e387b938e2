import logging
from aiohttp import web

from org.dsnp.frequency.app.config import FrequencyResolverAppKey
from org.dsnp.frequency.errors import ChainConnectionError

logger = logging.getLogger(__name__)


async def handle_internal_ready(request: web.Request):
    resolver = request.app[FrequencyResolverAppKey]
    try:
        await resolver.connections.acquire()
    except ChainConnectionError:
        logger.warning("Frequency node is not reachable", exc_info=True)
        return web.Response(status=503)
    return web.Response(status=200)


async def handle_internal_alive(request: web.Request):
    return web.Response(status=200)
