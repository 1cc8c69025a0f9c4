from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import Optional

from ..database import get_db
from ..schemas.transaction import (
    UpdateTransactionRequest, ProcessRefundRequest,
    AdminTransactionOut, AdminTransactionList, TransactionOut,
    SuccessResponse, RefundResponse
)
from ..services.admin_auth import AdminAuthorizer
from ..services.auth_provider import AuthUser
from ..services.transaction_service import TransactionService
from ..utils.dependencies import (
    require_admin, get_bearer_token, get_admin_authorizer, admin_json_body, json_body_openapi
)
from ..utils.errors import handler_boundary
from ..utils.logging_config import get_logger
from ..utils.rate_limiter import limiter, get_rate_limit, rate_limit_exempt

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

# Only mounted outside production when ENABLE_DEBUG_ENDPOINTS is set
debug_router = APIRouter(prefix="/api/admin", tags=["Admin debug"])


@router.get("/list-transactions", response_model=AdminTransactionList)
@limiter.limit(get_rate_limit("admin_read"), exempt_when=rate_limit_exempt)
def list_transactions(
    request: Request,
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """All transactions with booking and owner, newest first"""
    with handler_boundary("list-transactions"):
        transactions = TransactionService(db).list_all()
        return AdminTransactionList(
            data=[AdminTransactionOut.model_validate(t) for t in transactions]
        )


@router.post(
    "/update-transaction",
    response_model=SuccessResponse,
    openapi_extra=json_body_openapi(UpdateTransactionRequest),
)
@limiter.limit(get_rate_limit("admin_write"), exempt_when=rate_limit_exempt)
def update_transaction(
    request: Request,
    body: UpdateTransactionRequest = Depends(admin_json_body(UpdateTransactionRequest)),
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Approve or reject a transaction.

    An unknown transaction_id is a 404 rather than a silent success.
    """
    with handler_boundary("update-transaction"):
        TransactionService(db).set_status(body.transaction_id, body.action, admin_id=admin.id)
        return SuccessResponse()


@router.post(
    "/process-refund",
    response_model=RefundResponse,
    openapi_extra=json_body_openapi(ProcessRefundRequest),
)
@limiter.limit(get_rate_limit("admin_write"), exempt_when=rate_limit_exempt)
def process_refund(
    request: Request,
    body: ProcessRefundRequest = Depends(admin_json_body(ProcessRefundRequest)),
    admin: AuthUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Refund a transaction: flag the original and append a negative refund leg"""
    with handler_boundary("process-refund"):
        refund = TransactionService(db).process_refund(
            body.transaction_id,
            amount=body.amount,
            booking_id=body.booking_id,
            user_id=body.user_id,
            admin_id=admin.id,
        )
        return RefundResponse(refund=TransactionOut.model_validate(refund))


@debug_router.get("/debug-token")
def debug_token(
    token: Optional[str] = Depends(get_bearer_token),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
    db: Session = Depends(get_db)
):
    """Report what the admin check makes of the caller's token"""
    # Never log the token itself
    logger.info(f"debug-token check: token present={bool(token)} length={len(token) if token else 0}")
    with handler_boundary("debug-token"):
        return {"debug": authorizer.inspect(db, token)}
