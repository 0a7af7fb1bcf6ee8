# api/routes/points.py
from fastapi import APIRouter, Depends, Header, Query, Request
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from core.clients import PaymentClient
from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.payment_service import PaymentService
from core.services.points_service import PointsService
from api.deps import get_payment_client, require_user
from api.schemas.payment import CheckoutConfirmation, CheckoutRequest, CheckoutSession, WebhookAck
from api.schemas.user import Balance

router = APIRouter(tags=["points"])

@router.get("/points", response_model=Balance)
def get_balance(db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(PointsService(db).get_balance(user.id))

@router.post("/payments/checkout", response_model=CheckoutSession)
def create_checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    client: PaymentClient = Depends(get_payment_client)
):
    """Start a hosted checkout for a points purchase (10 points = $1)"""
    return unwrap(PaymentService(db, client=client).create_checkout(user, payload.points))

@router.get("/payments/success", response_model=CheckoutConfirmation)
def confirm_checkout(
    session_id: str = Query(..., description="Checkout session id from the success redirect"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    client: PaymentClient = Depends(get_payment_client)
):
    """
    Confirm a purchase after the checkout redirect.

    The session is fetched from the provider; nothing in the query string
    besides its id is trusted. Confirming twice credits once.
    """
    return unwrap(PaymentService(db, client=client).confirm_checkout(user, session_id))

@router.post("/payments/webhook", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    stripe_signature: str = Header("", alias="Stripe-Signature"),
    db: Session = Depends(get_db),
    client: PaymentClient = Depends(get_payment_client)
):
    payload = await request.body()
    # The service does blocking database work; keep it off the event loop
    service = PaymentService(db, client=client)
    return unwrap(await run_in_threadpool(service.handle_webhook, payload, stripe_signature))
