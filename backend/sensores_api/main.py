"""
Sensores/Actuadores - Backend API
=================================
FastAPI application for storing sensor and actuator records in MongoDB
and mirroring every change to WebSocket clients in real time.

ARCHITECTURE:
    [HTTP client] --REST--> [Records Router] --> [RecordGateway] --> [RecordStore] --> MongoDB
                                                        |
                                                        v
    [WebSocket clients] <--broadcast-- [ChangeNotifier]
            |
            +-- "new-reading" --> [RecordGateway.create]

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config
    cp env.example.txt .env
    # Edit .env with your settings

    # Run the server
    sensores-api
    # or
    uvicorn sensores_api.main:app --reload --port 3000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:3000/api-docs
    - ReDoc: http://localhost:3000/redoc
    - OpenAPI JSON: http://localhost:3000/openapi.json
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sensores_api import __version__
from sensores_api.routers import (
    realtime_router,
    records_router,
    set_notifier,
    set_record_gateway,
)
from sensores_api.services import ChangeNotifier, RecordGateway, RecordStore


# Load environment variables from .env file
load_dotenv()


# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        PORT: Port to listen on (default: 3000)
        HOST: Interface to bind (default: 0.0.0.0)
        MONGO_URI: MongoDB connection string
        MONGO_DB: Database name (default: the one in MONGO_URI)
        CORS_ORIGINS: Comma-separated allowed origins (default: *)
        NOTIFIER_SEND_TIMEOUT: Seconds before a slow WebSocket client is dropped
        LOG_LEVEL: DEBUG, INFO, WARNING... (default: INFO)
    """

    PORT = int(os.getenv("PORT", "3000"))
    HOST = os.getenv("HOST", "0.0.0.0")

    MONGO_URI = os.getenv("MONGO_URI", "mongodb://127.0.0.1:27017/incubadoraDB")
    MONGO_DB = os.getenv("MONGO_DB") or None

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    NOTIFIER_SEND_TIMEOUT = float(os.getenv("NOTIFIER_SEND_TIMEOUT", "5.0"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Store to use instead of one built from Config
               (tests pass a store backed by mongomock-motor)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        STARTUP:
            1. Connect the record store
            2. Create the notifier and the gateway
            3. Inject them into the routers

        SHUTDOWN:
            1. Close every WebSocket connection
            2. Disconnect from MongoDB
        """
        # ========== STARTUP ==========
        print("=" * 60)
        print("SENSORES/ACTUADORES API - Starting Backend")
        print("=" * 60)

        record_store = store or RecordStore(Config.MONGO_URI, database=Config.MONGO_DB)
        await record_store.connect()

        notifier = ChangeNotifier(send_timeout=Config.NOTIFIER_SEND_TIMEOUT)
        gateway = RecordGateway(record_store, notifier)

        set_record_gateway(gateway)
        set_notifier(notifier)
        app.state.notifier = notifier

        print(f"   Server: http://localhost:{Config.PORT}")
        print(f"   Swagger Docs: http://localhost:{Config.PORT}/api-docs")
        print(f"   WebSocket: ws://localhost:{Config.PORT}/ws")
        print("=" * 60)

        yield  # Application runs here

        # ========== SHUTDOWN ==========
        print("Shutting down...")
        await notifier.close()
        await record_store.disconnect()
        set_record_gateway(None)
        set_notifier(None)
        print("Shutdown complete")

    app = FastAPI(
        title="API Sensores y Actuadores",
        description="""
## Overview

API para la gestión de sensores y actuadores.

Every record lives in one MongoDB collection with the fields
`tipo`, `nombre`, `valor`, `unidad` and `fechaHora`.

## Real time

Connect a WebSocket to `/ws` to receive `record-saved`, `record-updated`
and `record-deleted` events. Send `{"event": "new-reading", "data": {...}}`
to store a reading without going through HTTP.
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/api-docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ERROR BODIES - always {"error": "..."}
    # =========================================================================

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected body on {request.method} {request.url.path}: {len(exc.errors())} errors")
        return JSONResponse(status_code=400, content={"error": "Datos inválidos"})

    app.include_router(records_router)
    app.include_router(realtime_router)

    @app.get("/", summary="API Information")
    async def root():
        """Root endpoint with API overview."""
        return {
            "name": "API Sensores y Actuadores",
            "version": __version__,
            "documentation": {
                "swagger": "/api-docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json",
            },
            "endpoints": {
                "separados": "GET /sensoresactuadores/separados",
                "create": "POST /sensoresactuadores",
                "update": "PUT /sensoresactuadores/{id}",
                "delete": "DELETE /sensoresactuadores/{id}",
                "get": "GET /sensoresactuadores/buscar/{id}",
                "search": "GET /sensoresactuadores/buscar?nombre=&tipo=",
                "realtime": "WS /ws",
            },
        }

    @app.get("/health", summary="Health Check")
    async def health(request: Request):
        """Health check endpoint."""
        notifier = getattr(request.app.state, "notifier", None)
        return {
            "status": "healthy",
            "subscribers": notifier.subscriber_count if notifier else 0,
        }

    return app


app = create_app()


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_level=Config.LOG_LEVEL.lower())
