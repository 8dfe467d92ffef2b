"""
SAFE-8 FastAPI application entry point.

Flow: lead → assessment submit → pillar scores → insights → PDF report → download / email
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app import __version__
from app.config import get_settings
from app.db.session import check_db_connection, engine
from app.services.email_service import EmailClient, EmailConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _email_status() -> str:
    """'configured' when an SMTP client could send, else 'disabled'."""
    client = EmailClient(EmailConfig.from_settings(get_settings()))
    return "configured" if client.enabled else "disabled"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Verify the database before serving; release the pool on shutdown."""
    settings = get_settings()
    logger.info("safe8_starting: version=%s brand=%s", __version__, settings.report_brand_name)
    try:
        try:
            check_db_connection()
        except Exception as e:
            logger.critical("safe8_database_unreachable: %s", e)
            raise
        logger.info("safe8_database_ok")

        if _email_status() == "disabled":
            logger.warning("safe8_email_disabled: SMTP host/user/password incomplete")
        elif not settings.email_on_submit:
            logger.info("safe8_email_on_submit_off: reports are emailed on request only")

        yield
    finally:
        engine.dispose()
        logger.info("safe8_stopped: connection pool disposed")


def create_app() -> FastAPI:
    """Build the application: lead and assessment routers plus /health."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    from app.api import assessments_router, leads_router

    app.include_router(leads_router, prefix="/api/leads", tags=["leads"])
    app.include_router(assessments_router, prefix="/api/assessments", tags=["assessments"])

    @app.get("/health")
    def health():
        """Database reachability and whether email delivery is available."""
        body = {"version": __version__, "email": _email_status()}
        try:
            check_db_connection()
        except Exception as e:
            logger.warning("health_database_unreachable: %s", e)
            body.update(status="unhealthy", database="disconnected")
            return JSONResponse(status_code=503, content=body)
        body.update(status="ok", database="connected")
        return body

    return app


app = create_app()
