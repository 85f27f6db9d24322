"""Booking repository - Database operations for bookings and payment idempotency"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Booking, ProcessedPayment, utcnow

logger = logging.getLogger(__name__)


class BookingRepository:
    """Repository for booking database operations"""

    # ========================================================================
    # BOOKING CRUD OPERATIONS
    # ========================================================================

    @staticmethod
    def create(db: Session, **booking_data) -> str:
        """Insert a pending booking and return its ID"""
        booking = Booking(payment_status="pending", booking_status="pending", **booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking.id

    @staticmethod
    def get_by_id(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_by_payment_reference(db: Session, reference: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.payment_reference == reference).first()

    @staticmethod
    def update_status(
        db: Session,
        booking_id: str,
        new_status: str,
        payment_reference: Optional[str] = None,
        expected_status: Optional[str] = None,
    ) -> bool:
        """
        Set the booking status; a payment reference also marks the booking paid.

        The reference is only written when the booking has none yet; an
        existing reference is never replaced.

        With ``expected_status`` the update only applies if the row still has
        that status. Returns False when nothing was updated. Transition rules
        are enforced by BookingService, not here.
        """
        values = {"booking_status": new_status, "updated_at": utcnow()}
        if payment_reference:
            values["payment_reference"] = func.coalesce(Booking.payment_reference, payment_reference)
            values["payment_status"] = "paid"

        stmt = update(Booking).where(Booking.id == booking_id)
        if expected_status:
            stmt = stmt.where(Booking.booking_status == expected_status)
        result = db.execute(stmt.values(**values))
        db.commit()
        return result.rowcount > 0

    @staticmethod
    def set_payment_status(db: Session, booking_id: str, payment_status: str) -> bool:
        result = db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(payment_status=payment_status, updated_at=utcnow())
        )
        db.commit()
        return result.rowcount > 0

    @staticmethod
    def attach_payment_intent(
        db: Session,
        booking_id: str,
        reference: str,
        authorization_url: str,
        access_code: str,
    ) -> bool:
        """
        Store the checkout intent once.

        Conditional on no reference being set yet; returns False if another
        request attached one first.
        """
        result = db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.payment_reference.is_(None))
            .values(
                payment_reference=reference,
                payment_authorization_url=authorization_url,
                payment_access_code=access_code,
                updated_at=utcnow(),
            )
        )
        db.commit()
        return result.rowcount > 0

    # ========================================================================
    # BOOKING QUERIES
    # ========================================================================

    @staticmethod
    def query_by_date_range(
        db: Session,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[str]] = None,
    ) -> list[Booking]:
        """Bookings starting in [start, end), oldest first"""
        query = db.query(Booking).filter(Booking.start_time >= start, Booking.start_time < end)
        if statuses:
            query = query.filter(Booking.booking_status.in_(list(statuses)))
        return query.order_by(Booking.start_time.asc()).all()

    @staticmethod
    def list_stale_pending(db: Session, older_than: datetime) -> list[Booking]:
        """Pending, unpaid bookings created before ``older_than``"""
        return (
            db.query(Booking)
            .filter(
                Booking.booking_status == "pending",
                Booking.payment_status != "paid",
                Booking.created_at < older_than,
            )
            .order_by(Booking.created_at.asc())
            .all()
        )

    # ========================================================================
    # PAYMENT IDEMPOTENCY
    # ========================================================================

    @staticmethod
    def is_payment_processed(db: Session, reference: str) -> bool:
        return db.get(ProcessedPayment, reference) is not None

    @staticmethod
    def mark_payment_processed(
        db: Session, reference: str, booking_id: str, commit: bool = True
    ) -> bool:
        """
        Record ``reference`` as consumed.

        The primary key makes this a conditional insert: exactly one caller
        gets True, every duplicate gets False. With ``commit=False`` the row is
        only flushed so the caller can commit it with its own changes.
        """
        if db.get(ProcessedPayment, reference) is not None:
            return False

        db.add(ProcessedPayment(reference=reference, booking_id=booking_id))
        try:
            if commit:
                db.commit()
            else:
                db.flush()
        except IntegrityError:
            db.rollback()
            logger.info(f"🔁 Payment reference {reference} was already marked processed")
            return False
        return True
