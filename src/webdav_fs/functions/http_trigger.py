"""HTTP trigger blueprint — health check of the WebDAV storage."""

import json
import logging

import azure.functions as func

from webdav_fs import __version__
from webdav_fs.config import load_config
from webdav_fs.dav.client import DavTransportError
from webdav_fs.driver import webdav_driver_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint.

    Returns service status, version and whether the root folder of the
    configured store answers. An unreachable store yields 503.
    """
    logger.info("[health_check] health check requested")

    try:
        driver = webdav_driver_from_config(load_config())
        reachable = driver.folder_exists(driver.get_root_level_folder())
        body = json.dumps({"status": "ok", "version": __version__, "store_reachable": reachable})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except DavTransportError as exc:
        logger.error("[health_check] store unreachable; url:%s;message:%s", exc.url, exc.message)
        error_body = json.dumps(
            {"status": "unavailable", "version": __version__, "store_reachable": False}
        )
        return func.HttpResponse(error_body, status_code=503, mimetype="application/json")

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")
