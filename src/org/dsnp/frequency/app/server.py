import logging
from time import time
from typing import Optional
from aiohttp import web
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from org.dsnp.frequency.app.config import (
    DIDResolverAppKey,
    FrequencyResolverAppKey,
    MetricsClientAppKey,
    Settings,
    SettingsAppKey,
    load_settings,
)
from org.dsnp.frequency.app.handlers.identifiers import handle_identifier
from org.dsnp.frequency.app.handlers.internal import (
    handle_internal_alive,
    handle_internal_ready,
)
from org.dsnp.frequency.app.metrics import create_metrics_client
from org.dsnp.frequency.resolve.registry import DSNPDIDResolver

logger = logging.getLogger(__name__)


async def resolver_context(app: web.Application):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    metrics_client = create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        prefix=settings.statsd_prefix,
        debug=settings.debug,
    )
    await metrics_client.connect()
    app[MetricsClientAppKey] = metrics_client

    if FrequencyResolverAppKey not in app:
        app[FrequencyResolverAppKey] = settings.create_resolver()
    app[DIDResolverAppKey] = DSNPDIDResolver([app[FrequencyResolverAppKey]])

    logger.info("Startup complete")

    yield

    logger.info("Shutting down")

    await app[FrequencyResolverAppKey].disconnect()
    await app[MetricsClientAppKey].close()


@web.middleware
async def sentry_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
        return response
    except Exception as e:
        sentry_sdk.capture_exception(e)
        raise e


@web.middleware
async def metrics_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    request_method: str = request.method
    # The matched route keeps DIDs out of metric dimensions.
    resource = request.match_info.route.resource
    request_path = resource.canonical if resource is not None else request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except web.HTTPException as e:
        response_status_code = e.status
        raise e
    except Exception as e:
        metrics_client.increment(
            "server.request.exception",
            1,
            tag_dict={
                "exception": type(e).__name__,
                "path": request_path,
                "method": request_method,
            },
        )
        raise e
    finally:
        metrics_client.timer(
            "server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            "server.request.count",
            1,
            tag_dict={
                "path": request_path,
                "method": request_method,
                "status": response_status_code,
            },
        )


async def start_web_server(
    settings: Optional[Settings] = None, resolver=None
) -> web.Application:
    if settings is None:
        settings = load_settings()
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            integrations=[AioHttpIntegration()],
        )
    app = web.Application(middlewares=[metrics_middleware, sentry_middleware])

    app[SettingsAppKey] = settings
    if resolver is not None:
        app[FrequencyResolverAppKey] = resolver

    app.add_routes(
        [
            web.get("/1.0/identifiers/{did}", handle_identifier),
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
        ]
    )

    app.cleanup_ctx.append(resolver_context)

    return app
