"""
Transaction Service

Admin workflows over the transactions ledger:
- list every transaction with its booking and owner
- approve / reject a transaction
- refund a transaction (guarded against running twice)

Plus the end-user history view, which hides refund legs.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..models.booking import Booking
from ..models.transaction import Transaction, TransactionStatus, RefundStatus, REFUND_PAYMENT_METHOD
from ..utils.db_helpers import acquire_row_lock
from ..utils.errors import BadRequest, NotFound, AlreadyRefunded
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

ACTION_STATUS = {
    "approve": TransactionStatus.COMPLETED.value,
    "reject": TransactionStatus.FAILED.value,
}


def normalize_refund_amount(amount) -> Decimal:
    """Refund legs always carry a negative magnitude, whatever sign was sent."""
    return -abs(Decimal(str(amount or 0)))


class TransactionService:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[Transaction]:
        """Every transaction, newest first, refund legs included."""
        return (
            self.db.query(Transaction)
            .options(joinedload(Transaction.booking), joinedload(Transaction.profile))
            .order_by(Transaction.created_at.desc())
            .all()
        )

    def history_for_user(self, user_id: str) -> List[Transaction]:
        """The user's own payments, newest first, without refund legs."""
        return (
            self.db.query(Transaction)
            .options(joinedload(Transaction.booking).joinedload(Booking.destination))
            .filter(
                Transaction.user_id == user_id,
                Transaction.payment_method != REFUND_PAYMENT_METHOD,
            )
            .order_by(Transaction.created_at.desc())
            .all()
        )

    def set_status(self, transaction_id: Optional[str], action: Optional[str], admin_id: str) -> Transaction:
        """
        Approve (-> completed) or reject (-> failed) a transaction.

        The current status is not checked; repeating the call simply rewrites it.
        """
        if not transaction_id:
            raise BadRequest("transaction_id required")
        if action not in ACTION_STATUS:
            raise BadRequest("action must be approve or reject")

        transaction = self.db.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            raise NotFound("Transaction not found")

        old_status = transaction.status
        transaction.status = ACTION_STATUS[action]
        self.db.commit()

        logger.transaction_status_changed(transaction_id, old_status, transaction.status, admin_id)
        return transaction

    def process_refund(
        self,
        transaction_id: Optional[str],
        amount=None,
        booking_id: Optional[str] = None,
        user_id: Optional[str] = None,
        admin_id: Optional[str] = None
    ) -> Transaction:
        """
        Refund a transaction.

        The original row is flagged refunded and the refund leg is inserted in
        one database transaction. Flagging the booking happens afterwards and
        is best-effort.
        """
        if not transaction_id:
            raise BadRequest("transaction_id required")

        refund_amount = normalize_refund_amount(amount)
        if not refund_amount.is_finite():
            raise BadRequest("amount must be a finite number")

        original = acquire_row_lock(self.db, Transaction, Transaction.id == transaction_id)
        if original is None:
            self.db.rollback()
            raise NotFound("Transaction not found")
        if original.is_refunded:
            self.db.rollback()
            raise AlreadyRefunded()

        refund = Transaction(
            user_id=user_id or None,
            booking_id=booking_id or None,
            amount=refund_amount,
            payment_method=REFUND_PAYMENT_METHOD,
            status=TransactionStatus.COMPLETED.value,
            refund_status=RefundStatus.NONE.value,
        )
        try:
            original.status = TransactionStatus.REFUNDED.value
            original.refund_status = RefundStatus.PROCESSED.value
            self.db.add(refund)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(refund)

        if booking_id:
            self._mark_booking_refunded(booking_id)

        logger.refund_processed(transaction_id, refund.id, refund.amount, booking_id, admin_id)
        return refund

    def _mark_booking_refunded(self, booking_id: str):
        """The refund already stands; a failure here is only logged."""
        try:
            updated = (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .update({Booking.refund_processed: True}, synchronize_session=False)
            )
            self.db.commit()
            if not updated:
                logger.warning(f"Booking {booking_id} not found while flagging refund")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Could not flag booking {booking_id} as refunded: {e}")
