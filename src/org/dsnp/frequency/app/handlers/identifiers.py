import json
import logging
import traceback
from aiohttp import hdrs, web
import sentry_sdk

from org.dsnp.frequency.app.config import DIDResolverAppKey, SettingsAppKey
from org.dsnp.frequency.errors import ResolverError
from org.dsnp.frequency.resolve.registry import DID_LD_JSON

logger = logging.getLogger(__name__)

DID_RESOLUTION_CONTEXT = "https://w3id.org/did-resolution/v1"

ERROR_STATUS = {
    "invalidDid": 400,
    "notFound": 404,
    "methodNotSupported": 501,
}


async def handle_identifier(request: web.Request):
    """Resolve the DID in the path, following the Universal Resolver driver API."""
    did = request.match_info["did"]
    did_resolver = request.app[DIDResolverAppKey]

    try:
        result = await did_resolver.resolve(did)
    except ResolverError as e:
        logger.error(
            f"Error resolving {did}: {type(e).__name__}: {str(e)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )
        sentry_sdk.capture_exception(e)

        metadata = {"error": "internalError", "errorType": type(e).__name__}
        settings = request.app.get(SettingsAppKey)
        if settings and settings.debug:
            metadata["errorMessage"] = str(e)

        raise web.HTTPBadGateway(
            body=json.dumps(
                {
                    "@context": DID_RESOLUTION_CONTEXT,
                    "didDocument": None,
                    "didResolutionMetadata": metadata,
                    "didDocumentMetadata": {},
                }
            ),
            content_type="application/json",
        )

    body = {"@context": DID_RESOLUTION_CONTEXT, **result.to_json()}
    if result.error is not None:
        return web.json_response(body, status=ERROR_STATUS.get(result.error, 500))

    if DID_LD_JSON in request.headers.get(hdrs.ACCEPT, ""):
        return web.json_response(result.did_document, content_type=DID_LD_JSON)

    return web.json_response(
        body, content_type="application/did-resolution+json"
    )
