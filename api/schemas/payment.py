# api/schemas/payment.py
from pydantic import BaseModel

class CheckoutRequest(BaseModel):
    points: int

class CheckoutSession(BaseModel):
    session_id: str
    url: str

class CheckoutConfirmation(BaseModel):
    credited: bool
    points_added: int
    balance: int

class WebhookAck(BaseModel):
    received: bool
    credited: bool = False
