from __future__ import annotations

import logging

from fastapi import FastAPI

from common.report_engine.session import ReportSession
from connectors.storage.config import get_app_config, open_store

from api.reports import build_router

logger = logging.getLogger(__name__)


def create_app(session: ReportSession | None = None) -> FastAPI:
    if session is None:
        config = get_app_config()
        for warning in config.validate_config():
            logger.warning("Config %s: %s", warning.field, warning.message)
        session = ReportSession(open_store(config), config=config)
        startup = session.startup()
        if startup.repair is not None and startup.repair.repaired:
            logger.info("Stored data repaired at startup: %s", startup.repair.actions)

    app = FastAPI(title="Report Assist")
    app.include_router(build_router(session))
    return app
