import uvicorn
import time
import logging
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from crashlog import __version__
from crashlog.api.reports import router as reports_router
from crashlog.api.status import router as status_router
from crashlog.core import config
from crashlog.utils.logging_config import setup_logging

setup_logging(level=getattr(logging, config.LOG_LEVEL, logging.INFO), log_dir=config.LOG_DIR)
logger = logging.getLogger("main")

app = FastAPI(title="Crash Log Relay", version=__version__)


# ---------------------------------------------------------------------------
# Logging Middleware
# ---------------------------------------------------------------------------
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Incoming: {request.method} {request.url.path} from {client_host}")

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000
            logger.info(
                f"Outgoing: {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.2f}ms"
            )
            return response
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} - Error: {str(e)}")
            raise


app.add_middleware(LoggingMiddleware)

# Register routers
app.include_router(status_router, tags=["Service"])
app.include_router(reports_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000)
