from __future__ import annotations

from decimal import Decimal
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from coursehub.db import models

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity

    def get(self, entity_id: str) -> ModelT | None:
        return self.db.get(self.model, entity_id)

    def list(self, limit: int = 100, offset: int = 0) -> list[ModelT]:
        stmt = select(self.model).offset(offset).limit(limit)
        return self.db.execute(stmt).scalars().all()

    def update(self, entity: ModelT, **kwargs) -> ModelT:
        for key, value in kwargs.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.flush()


class CourseRepository(BaseRepository[models.Course]):
    model = models.Course

    def list(self, limit: int = 100, offset: int = 0) -> list[models.Course]:
        stmt = select(models.Course).order_by(models.Course.created_at, models.Course.id).offset(offset).limit(limit)
        return self.db.execute(stmt).scalars().all()

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(models.Course)).scalar_one()


class PaymentRepository(BaseRepository[models.Payment]):
    model = models.Payment

    def list(self, limit: int = 100, offset: int = 0, status: str | None = None) -> list[models.Payment]:
        stmt = select(models.Payment).order_by(models.Payment.created_at.desc(), models.Payment.id)
        if status is not None:
            stmt = stmt.where(models.Payment.status == status)
        stmt = stmt.offset(offset).limit(limit)
        return self.db.execute(stmt).scalars().all()

    def update_status(
        self,
        payment_id: str,
        status: str,
        transaction_id: str | None = None,
    ) -> models.Payment | None:
        if status not in models.VALID_PAYMENT_STATUSES:
            raise ValueError(f"Invalid payment status: {status!r}")
        payment = self.get(payment_id)
        if payment is None:
            return None
        payment.status = status
        if transaction_id:
            payment.transaction_id = transaction_id
        self.db.flush()
        return payment

    def list_by_phone(self, phone: str, status: str | None = None) -> list[models.Payment]:
        stmt = (
            select(models.Payment)
            .where(models.Payment.phone == phone)
            .order_by(models.Payment.created_at.desc(), models.Payment.id)
        )
        if status is not None:
            stmt = stmt.where(models.Payment.status == status)
        return self.db.execute(stmt).scalars().all()

    def get_completed_for_course(self, course_id: str, phone: str) -> models.Payment | None:
        stmt = (
            select(models.Payment)
            .where(
                models.Payment.course_id == course_id,
                models.Payment.phone == phone,
                models.Payment.status == models.PAYMENT_COMPLETED,
            )
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def summary(self) -> dict:
        """Counts per status, completed revenue, and completed sales per method."""
        by_status = dict(
            self.db.execute(
                select(models.Payment.status, func.count()).group_by(models.Payment.status)
            ).all()
        )
        revenue = self.db.execute(
            select(func.coalesce(func.sum(models.Payment.amount), 0)).where(
                models.Payment.status == models.PAYMENT_COMPLETED
            )
        ).scalar_one()
        by_method = dict(
            self.db.execute(
                select(models.Payment.payment_method, func.count())
                .where(models.Payment.status == models.PAYMENT_COMPLETED)
                .group_by(models.Payment.payment_method)
            ).all()
        )
        return {
            "total": sum(by_status.values()),
            "by_status": {status: by_status.get(status, 0) for status in sorted(models.VALID_PAYMENT_STATUSES)},
            "completed_by_method": by_method,
            "revenue": Decimal(str(revenue)).quantize(Decimal("0.01")),
        }
