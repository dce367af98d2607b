"""
Main FastAPI Application
=======================

Entry point for the yieldmap API server.
"""

import uvicorn
import logging
import sys
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv
load_dotenv()

from yieldmap import __version__
from yieldmap.api.router import api_router
from yieldmap.services.logging_service import init_logging


class ColoredFormatter(logging.Formatter):
    """Level-colored console formatter"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        reset = self.COLORS['RESET']
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{reset}"
        return super().format(record)


def setup_logging():
    """Console logging for the server process"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)

    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


def create_app() -> FastAPI:
    # Ring buffer must be live for /logs/recent however the app is served
    init_logging()

    app = FastAPI(
        title="yieldmap API",
        description="County attribute to polygon joins for choropleth maps",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logging.getLogger(__name__).error(f"❌ Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if app.debug else "An unexpected error occurred"
            }
        )

    @app.get("/")
    async def root():
        return {
            "message": f"yieldmap API v{__version__}",
            "status": "running",
            "docs": "/docs",
        }

    return app


app = create_app()


def run():
    setup_logging()
    # setup_logging() clears root handlers; put the ring buffer and file back
    init_logging()
    logger = logging.getLogger(__name__)
    logger.info("🚀 Starting yieldmap API Server")
    uvicorn.run(
        "yieldmap.main:app",
        host="127.0.0.1",
        port=8000,
        reload=False,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    run()
