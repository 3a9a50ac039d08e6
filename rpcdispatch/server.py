"""FastAPI server exposing the JSON-RPC dispatcher over HTTP."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import Response

from .config import load_config
from .jsonrpc.handler import JSONRPCHandler
from .methods import register_example_methods

logger = logging.getLogger(__name__)

# Seconds to wait for timed-out handlers on shutdown
SHUTDOWN_DRAIN_TIMEOUT = 5.0


def create_app(jsonrpc_handler: JSONRPCHandler) -> FastAPI:
    """Build an app serving ``jsonrpc_handler``.

    Methods must be registered before the first request arrives.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting JSON-RPC server...")
        logger.info(f"Registered {len(jsonrpc_handler.methods)} JSON-RPC methods")
        if jsonrpc_handler.default_timeout:
            logger.info(f"Default call timeout: {jsonrpc_handler.default_timeout}s")
        yield
        logger.info("Shutting down JSON-RPC server...")
        if jsonrpc_handler.pending:
            logger.info(f"Waiting for {jsonrpc_handler.pending} timed-out handlers")
            await jsonrpc_handler.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)

    app = FastAPI(
        title="rpcdispatch",
        description="Transport independent JSON-RPC 2.0 dispatcher served over HTTP",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.post("/")
    @app.post("/rpc")
    @app.post("/jsonrpc")
    async def jsonrpc_endpoint(request: Request) -> Response:
        """JSON-RPC 2.0 endpoint.

        The raw body is handed to the dispatcher untouched so that parse
        errors and batches are handled by the JSON-RPC layer, not FastAPI.
        Notifications get 202 Accepted with an empty body.
        """
        body = await request.body()
        payload = await jsonrpc_handler.serve(body)
        if payload is None:
            return Response(status_code=202)
        return Response(content=payload, media_type="application/json")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "rpcdispatch",
            "version": "1.0.0",
            "methods": len(jsonrpc_handler.methods),
            "default_timeout": jsonrpc_handler.default_timeout,
        }

    return app


def build_default_app() -> FastAPI:
    config = load_config()
    logging.basicConfig(level=config.log_level.upper())
    rpc = JSONRPCHandler.from_config(config)
    register_example_methods(rpc)
    return create_app(rpc)


app = build_default_app()
