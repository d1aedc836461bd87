"""Mobile-money checkout.

Flow for one purchase:

1. Resolve the course and the amount (defaults to the course price).
2. Normalize and validate the payer phone for the chosen provider.
3. Persist a ``pending`` payment carrying the canonical phone.
4. Charge through the gateway; mark the payment ``completed`` or ``failed``.
5. Build the USSD string the customer dials to confirm.

Gateway transport failures never escape: they are logged and recorded as a
failed payment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from coursehub.core.settings import Settings
from coursehub.db import models
from coursehub.db.repositories import CourseRepository, PaymentRepository
from coursehub.payments.gateway import (
    PaymentGatewayError,
    PaymentGatewayTimeoutError,
    WaafiPayClient,
)
from coursehub.payments.methods import PaymentMethod
from coursehub.payments.phone import is_valid_phone, normalize_phone
from coursehub.payments.ussd import generate_ussd, ussd_dial_uri

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Base class for checkout failures the caller should report."""


class CourseNotFoundError(CheckoutError, KeyError):
    pass


class InvalidPhoneError(CheckoutError, ValueError):
    pass


class UnsupportedPaymentMethodError(CheckoutError, ValueError):
    pass


@dataclass(slots=True)
class CheckoutResult:
    payment: models.Payment
    success: bool
    message: str
    ussd_code: str
    dial_uri: str


def merchant_phones(settings: Settings) -> dict[PaymentMethod, str]:
    """Configured merchant wallet per provider, normalized."""
    configured = {
        PaymentMethod.EVC: settings.merchant_phone_evc,
        PaymentMethod.ZAAD: settings.merchant_phone_zaad,
        PaymentMethod.EDAHAB: settings.merchant_phone_edahab,
    }
    return {
        method: normalize_phone(phone, method)
        for method, phone in configured.items()
        if phone
    }


class CheckoutService:
    def __init__(
        self,
        db: Session,
        gateway: WaafiPayClient,
        *,
        merchant_phones: dict[PaymentMethod, str] | None = None,
        strict_phone: bool = False,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.merchant_phones = merchant_phones or {}
        self.strict_phone = strict_phone
        self.courses = CourseRepository(db)
        self.payments = PaymentRepository(db)

    def create_payment(
        self,
        *,
        course_id: str,
        phone: str,
        payment_method: PaymentMethod,
        amount: Decimal | None = None,
    ) -> CheckoutResult:
        if not payment_method.is_mobile_money:
            raise UnsupportedPaymentMethodError(
                f"Payment method {payment_method.value!r} is not handled by mobile-money checkout"
            )

        course = self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)

        if not is_valid_phone(phone, payment_method, strict=self.strict_phone):
            raise InvalidPhoneError("Invalid Somalia phone number")
        canonical = normalize_phone(phone, payment_method)

        charge_amount = course.price if amount is None else amount
        payment = self.payments.create(
            course_id=course.id,
            phone=canonical,
            amount=charge_amount,
            payment_method=payment_method.value,
        )

        try:
            result = self.gateway.charge(
                phone=canonical,
                amount=charge_amount,
                method=payment_method,
                reference=f"{course.id}_{payment.id}",
                description=f"CourseHub - {course.id}",
            )
            success, message, transaction_id = result.success, result.message, result.transaction_id
        except (PaymentGatewayError, PaymentGatewayTimeoutError) as exc:
            logger.error("Payment gateway failure for payment %s: %s", payment.id, exc)
            success, message, transaction_id = False, f"Payment processing failed: {exc}", None

        self.payments.update_status(
            payment.id,
            models.PAYMENT_COMPLETED if success else models.PAYMENT_FAILED,
            transaction_id,
        )
        logger.info("Payment %s for course %s: %s", payment.id, course.id, payment.status)

        recipient = self.merchant_phones.get(payment_method, canonical)
        ussd_code = generate_ussd(payment_method, recipient, charge_amount)
        return CheckoutResult(
            payment=payment,
            success=success,
            message=message,
            ussd_code=ussd_code,
            dial_uri=ussd_dial_uri(ussd_code),
        )

    def get_payment(self, payment_id: str) -> models.Payment | None:
        return self.payments.get(payment_id)

    def completed_payment(self, course_id: str, phone: str) -> models.Payment | None:
        """Completed payment granting *phone* access to *course_id*, if any."""
        return self.payments.get_completed_for_course(course_id, normalize_phone(phone))

    def purchases(self, phone: str) -> list[models.Payment]:
        """Completed payments for *phone*, newest first."""
        return self.payments.list_by_phone(normalize_phone(phone), status=models.PAYMENT_COMPLETED)

    def has_access(self, course_id: str, phone: str) -> bool:
        return self.completed_payment(course_id, phone) is not None
