"""FastAPI dependency injection — database sessions and service factories.

The engine, session factory and payment gateway are created by the
application lifespan and read from ``app.state`` here.
"""
from __future__ import annotations

import hmac
from collections.abc import Generator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from coursehub.core.settings import Settings, get_settings
from coursehub.payments.checkout import CheckoutService, merchant_phones
from coursehub.payments.gateway import WaafiPayClient


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    db = request.app.state.session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_payment_gateway(request: Request) -> WaafiPayClient:
    return request.app.state.payment_gateway


def get_checkout_service(
    db: Session = Depends(get_db),
    gateway: WaafiPayClient = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> CheckoutService:
    """Return a CheckoutService bound to the current DB session."""
    return CheckoutService(
        db,
        gateway,
        merchant_phones=merchant_phones(settings),
        strict_phone=settings.phone_strict_carrier_codes,
    )


def require_admin(
    x_admin_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject requests without the configured ``X-Admin-Key`` header."""
    if not settings.admin_api_key:
        raise HTTPException(status_code=503, detail="Admin access is not configured")
    if x_admin_key is None or not hmac.compare_digest(x_admin_key, settings.admin_api_key):
        raise HTTPException(status_code=401, detail="Invalid admin key")
