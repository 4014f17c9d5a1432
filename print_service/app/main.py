from __future__ import annotations

import os
import threading
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from common.eventbus.config import is_publishing_enabled
from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import close_client

from .api.health import router as health_router
from .api.v1 import api_router
from .config import get_config
from .event_handlers.ledger_audit_handler import run_ledger_audit_consumer


load_dotenv()


def _audit_consumer_enabled() -> bool:
    raw_value = os.getenv("LEDGER_AUDIT_CONSUMER_ENABLED", "false").strip().lower()
    return raw_value in {"1", "true", "yes", "on"} and is_publishing_enabled()


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    """설정을 미리 검증하고, 필요하면 감사 로그 컨슈머 스레드를 함께 띄운다."""

    get_config()

    audit_stop_flag = [False]
    audit_thread: threading.Thread | None = None
    if _audit_consumer_enabled():
        audit_thread = threading.Thread(
            target=run_ledger_audit_consumer,
            args=(audit_stop_flag,),
            name="ledger-audit-consumer",
            daemon=True,
        )
        audit_thread.start()

    try:
        yield
    finally:
        audit_stop_flag[0] = True
        if audit_thread is not None:
            audit_thread.join(timeout=10.0)
        close_client()


def create_app() -> FastAPI:
    setup_logger(name="print-service")
    app = FastAPI(
        title="PrintDesk Print Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # 공통 Request/Span ID 로그 미들웨어
    app.add_middleware(RequestTraceMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    import uvicorn

    port = int(os.getenv("PRINT_SERVICE_PORT", "8000"))
    uvicorn.run(
        "print_service.app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
