"""Admin routes — catalog management, payment ledger and sales analytics.

Every route requires the ``X-Admin-Key`` header (see ``require_admin``).
"""
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from coursehub.api.deps import get_db, require_admin
from coursehub.api.routes.courses import format_money, serialize_course
from coursehub.api.routes.payments import serialize_payment
from coursehub.db.models import VALID_PAYMENT_STATUSES
from coursehub.db.repositories import CourseRepository, PaymentRepository

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class LocalizedText(BaseModel):
    so: str
    en: str
    ar: str


class CourseBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, max_length=64)
    title: LocalizedText
    description: LocalizedText
    category: str
    price: Decimal = Field(default=Decimal("0.50"), ge=0)
    duration: str
    rating: Decimal = Field(default=Decimal("4.5"), ge=0, le=5)
    image: str
    file_url: str = Field(alias="fileUrl")
    curriculum: list[str] = Field(default_factory=list)


class CourseUpdateBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: LocalizedText | None = None
    description: LocalizedText | None = None
    category: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    duration: str | None = None
    rating: Decimal | None = Field(default=None, ge=0, le=5)
    image: str | None = None
    file_url: str | None = Field(default=None, alias="fileUrl")
    curriculum: list[str] | None = None


class PaymentStatusBody(BaseModel):
    status: str
    transaction_id: str | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("/check", summary="Verify admin credentials")
def check_admin():
    return {"authenticated": True}


@router.post("/courses", status_code=201, summary="Create a course")
def create_course(body: CourseBody, db: Session = Depends(get_db)):
    repo = CourseRepository(db)
    fields = body.model_dump(exclude_none=True)
    if "id" in fields and repo.get(fields["id"]) is not None:
        raise HTTPException(status_code=409, detail=f"Course {fields['id']!r} already exists")
    course = repo.create(**fields)
    return serialize_course(course)


@router.put("/courses/{course_id}", summary="Update a course")
def update_course(course_id: str, body: CourseUpdateBody, db: Session = Depends(get_db)):
    repo = CourseRepository(db)
    course = repo.get(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    repo.update(course, **body.model_dump(exclude_none=True))
    return serialize_course(course)


@router.delete("/courses/{course_id}", summary="Delete a course and its payments")
def delete_course(course_id: str, db: Session = Depends(get_db)):
    repo = CourseRepository(db)
    course = repo.get(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    repo.delete(course)
    return {"deleted": course_id}


@router.get("/payments", summary="Payment ledger, newest first")
def list_payments(
    status: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    if status is not None and status not in VALID_PAYMENT_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status!r}")
    payments = PaymentRepository(db).list(limit=limit, offset=offset, status=status)
    return [serialize_payment(p) for p in payments]


@router.patch("/payments/{payment_id}", summary="Manually set a payment status")
def set_payment_status(payment_id: str, body: PaymentStatusBody, db: Session = Depends(get_db)):
    try:
        payment = PaymentRepository(db).update_status(payment_id, body.status, body.transaction_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return serialize_payment(payment)


@router.get("/analytics", summary="Sales summary")
def analytics(db: Session = Depends(get_db)):
    summary = PaymentRepository(db).summary()
    summary["revenue"] = format_money(summary["revenue"])
    summary["courses"] = CourseRepository(db).count()
    return summary
