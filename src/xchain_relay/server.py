"""HTTP surface for the relay (FastAPI).

Endpoints
---------
POST /transferCrossChain
    Body : {"receiver": "0x...", "destination": "0x...", "tokenId": "42"}
    Resp : {"success": true, "transferTx": "0x..."}
           {"success": false, "step": "mint|query|transfer|handler", "error": "..."}
"""

from __future__ import annotations

import json
import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.cors import CORSMiddleware

from .config import load_config
from .exceptions import RelayError
from .service import RelayService
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def create_app(service: RelayService) -> FastAPI:
    app = FastAPI(title="xchain-relay", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.post("/transferCrossChain")
    async def transfer_cross_chain(request: Request) -> JSONResponse:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

        result = await run_in_threadpool(service.handle, payload)
        return JSONResponse(result.to_response(), status_code=200 if result.success else 500)

    return app


def main() -> None:
    """Console entry point: load ``.env``, validate configuration, serve."""

    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOGLEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config()
        service = RelayService.from_config(config)
        service.workflow()
    except RelayError as exc:
        logger.error("Relay start-up failed: %s", exc)
        raise SystemExit(1) from exc

    host = os.getenv("HOST", DEFAULT_HOST)
    port = int(os.getenv("PORT", str(DEFAULT_PORT)))
    logger.info("Server running at http://%s:%s", host, port)
    uvicorn.run(create_app(service), host=host, port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
