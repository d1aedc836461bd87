"""FastAPI application.

Assembles CORS and all API routers.  The lifespan owns the long-lived
resources: database engine, session factory and payment gateway client.
This module is the authoritative app object — coursehub/main.py re-exports it.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from coursehub.api.routes.admin import router as admin_router
from coursehub.api.routes.courses import router as courses_router
from coursehub.api.routes.health import router as health_router
from coursehub.api.routes.payments import router as payments_router
from coursehub.api.routes.phone import router as phone_router
from coursehub.catalog.seed import seed_catalog
from coursehub.core.logging import setup_logging
from coursehub.core.settings import get_settings
from coursehub.db.base import Base
from coursehub.payments.gateway import WaafiPayClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    settings = get_settings()

    engine = create_engine(settings.database_url, pool_pre_ping=True)
    session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)
    if settings.db_create_schema:
        Base.metadata.create_all(bind=engine)
    if settings.seed_catalog:
        with session_factory() as session:
            seed_catalog(session)
            session.commit()

    gateway = WaafiPayClient.from_settings(settings)
    if gateway.demo_mode:
        logger.info("Payment gateway running in demo mode")

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.payment_gateway = gateway
    yield
    gateway.close()
    engine.dispose()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(courses_router)
app.include_router(payments_router)
app.include_router(phone_router)
app.include_router(admin_router)
