# backend/mentorhub/routes/payments.py
"""
Payment routes.

Router Endpoints:
    POST / - Register a processor payment intent for a pending session
    POST /callback - Payment outcome reported by the processor

The callback is not called by end users. When a shared secret is
configured, ``X-Payment-Signature`` must carry the hex HMAC-SHA256 of the
raw request body.
"""

import hashlib
import hmac
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, Request

from ..core.config import settings
from ..core.exceptions import DomainException, UnauthorizedException, ValidationException
from ..core.rbac import AccessContext
from ..dependencies.auth import get_access_context
from ..dependencies.services import get_payment_service
from ..schemas.payment import PaymentResponse
from ..services.payment_service import PaymentService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def verify_signature(body: bytes, signature: Optional[str]) -> bool:
    secret = settings.payment_callback_secret
    if secret is None:
        return True
    if not signature:
        return False
    expected = hmac.new(secret.get_secret_value().encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature.strip().lower())


@router.post("", response_model=PaymentResponse)
def register_payment(
    payload: Any = Body(None),
    ctx: AccessContext = Depends(get_access_context),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        payment = payment_service.register_payment(ctx, payload if payload is not None else {})
        return PaymentResponse.model_validate(payment)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/callback", response_model=PaymentResponse)
async def payment_callback(
    request: Request,
    x_payment_signature: Optional[str] = Header(None),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    body = await request.body()
    try:
        if not verify_signature(body, x_payment_signature):
            logger.warning("Rejected payment callback with invalid signature")
            raise UnauthorizedException("Invalid payment signature")
        try:
            payload = json.loads(body or b"{}")
        except ValueError:
            raise ValidationException.for_field("__root__", "Body must be valid JSON")

        payment = payment_service.handle_payment_callback(payload)
        return PaymentResponse.model_validate(payment)
    except DomainException as e:
        handle_domain_exception(e)
