from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .settings import settings
from .api.routes import router as api_router
from .services.search_gateway import SearchGatewayError, get_gateway

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("searchconsole")

app = FastAPI(title="News Search Console", debug=settings.app_env != "production")


@app.on_event("startup")
async def _startup_check():
    if not get_gateway().ping():
        # Hard fail if the search engine is not reachable
        raise RuntimeError("Search engine is not reachable at startup. Check ELASTIC_* settings and service status.")
    log.info("Connected to %s (default index %s)", settings.es_base_url, settings.es_index)


@app.exception_handler(SearchGatewayError)
async def _gateway_error(request: Request, exc: SearchGatewayError):
    status = exc.status_code if exc.status_code and 400 <= exc.status_code < 600 else 502
    log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"detail": exc.message}, status_code=status)


app.include_router(api_router)
