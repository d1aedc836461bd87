"""Checkout, payment status, course access and download routes."""
from __future__ import annotations

import re
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field

from coursehub.api.deps import get_checkout_service
from coursehub.api.routes.courses import format_money
from coursehub.core.settings import Settings, get_settings
from coursehub.db.models import Payment
from coursehub.payments.checkout import (
    CheckoutService,
    CourseNotFoundError,
    InvalidPhoneError,
    UnsupportedPaymentMethodError,
)
from coursehub.payments.methods import PaymentMethod

router = APIRouter(prefix="/api", tags=["payments"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class PaymentBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    phone: str = Field(min_length=8)
    payment_method: PaymentMethod = Field(alias="paymentMethod")
    amount: Decimal | None = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def serialize_payment(payment: Payment) -> dict:
    return {
        "id": payment.id,
        "course_id": payment.course_id,
        "phone": payment.phone,
        "amount": format_money(payment.amount),
        "payment_method": payment.payment_method,
        "status": payment.status,
        "transaction_id": payment.transaction_id,
        "created_at": payment.created_at.isoformat() if payment.created_at else None,
    }


def _download_name(title_en: str, file_url: str) -> str:
    stem = re.sub(r"\s+", "-", re.sub(r"[^a-zA-Z0-9\s]", "", title_en).strip())
    suffix = Path(file_url).suffix
    return f"{stem}{suffix}"


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/payments", summary="Pay for a course with mobile money")
def create_payment(body: PaymentBody, checkout: CheckoutService = Depends(get_checkout_service)):
    try:
        result = checkout.create_payment(
            course_id=body.course_id,
            phone=body.phone,
            payment_method=body.payment_method,
            amount=body.amount,
        )
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    except (InvalidPhoneError, UnsupportedPaymentMethodError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return {
        "payment": serialize_payment(result.payment),
        "success": result.success,
        "message": result.message,
        "ussd_code": result.ussd_code,
        "dial_uri": result.dial_uri,
    }


@router.get("/payments/{payment_id}", summary="Payment status")
def get_payment(payment_id: str, checkout: CheckoutService = Depends(get_checkout_service)):
    payment = checkout.get_payment(payment_id)
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return serialize_payment(payment)


@router.get("/access/{course_id}/{phone}", summary="Check whether a phone owns a course")
def check_access(course_id: str, phone: str, checkout: CheckoutService = Depends(get_checkout_service)):
    payment = checkout.completed_payment(course_id, phone)
    return {
        "has_access": payment is not None,
        "payment": serialize_payment(payment) if payment is not None else None,
    }


@router.get("/purchases/{phone}", summary="Courses bought with a phone")
def list_purchases(phone: str, checkout: CheckoutService = Depends(get_checkout_service)):
    payments = checkout.purchases(phone)
    return {
        "course_ids": sorted({p.course_id for p in payments}),
        "payments": [serialize_payment(p) for p in payments],
    }


@router.get("/download/{course_id}/{phone}", summary="Download a purchased course")
def download_course(
    course_id: str,
    phone: str,
    checkout: CheckoutService = Depends(get_checkout_service),
    settings: Settings = Depends(get_settings),
):
    if checkout.completed_payment(course_id, phone) is None:
        raise HTTPException(status_code=403, detail="Access denied. Payment required.")

    course = checkout.courses.get(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")

    root = Path(settings.course_files_dir).resolve()
    path = (root / course.file_url.lstrip("/")).resolve()
    if not path.is_relative_to(root) or not path.is_file():
        raise HTTPException(status_code=404, detail="Course file not found")

    return FileResponse(path, filename=_download_name(course.title.get("en", course.id), course.file_url))
