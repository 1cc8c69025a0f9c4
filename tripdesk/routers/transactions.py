from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.transaction import UserTransactionOut, UserTransactionList
from ..services.auth_provider import AuthUser
from ..services.transaction_service import TransactionService
from ..utils.dependencies import get_current_identity
from ..utils.errors import handler_boundary
from ..utils.rate_limiter import limiter, get_rate_limit, rate_limit_exempt

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("/history", response_model=UserTransactionList)
@limiter.limit(get_rate_limit("history"), exempt_when=rate_limit_exempt)
def transaction_history(
    request: Request,
    current_user: AuthUser = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """The caller's payments with booking and destination; refund legs are not shown"""
    with handler_boundary("transaction-history"):
        transactions = TransactionService(db).history_for_user(current_user.id)
        return UserTransactionList(
            data=[UserTransactionOut.model_validate(t) for t in transactions]
        )
