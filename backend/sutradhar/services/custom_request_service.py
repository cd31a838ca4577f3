from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import CustomRequest, Order, Seller, Product
from ..models.custom_requests import STATUS_NEW, STATUS_QUOTED, STATUS_ACCEPTED
from ..models.orders import ORDER_STATUS_PLACED
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_custom_request,
    ValidationError,
)

DEFAULT_PREVIEW_NOTES = "AI will analyze your request and provide suggestions to artisans"

CUSTOM_REQUEST_POLICY = ModelValidationPolicy(
    writable_fields={
        "brief_text", "brief_photos", "budget", "timeline_days", "materials",
        "seller_id", "product_id",
    },
    required_on_create={"brief_text"},
)


class CustomRequestError(Exception):
    """Raised when a request transition is not allowed."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def list_requests(buyer_id: int) -> list[dict]:
    requests = (
        db.session.query(CustomRequest)
        .options(joinedload(CustomRequest.seller))
        .filter_by(buyer_id=buyer_id)
        .order_by(CustomRequest.created_at.desc(), CustomRequest.id.desc())
        .all()
    )
    return [r.to_dict() for r in requests]


def create_request(buyer_id: int, payload: dict) -> dict:
    """New brief in status `new`. Budget, timeline and materials are optional."""
    patch = validate_payload(model=CustomRequest, payload=payload, policy=CUSTOM_REQUEST_POLICY, partial=False)
    enforce_rules_custom_request(patch)

    if patch.get("seller_id") is not None and not db.session.get(Seller, patch["seller_id"]):
        raise ValidationError("Seller not found")
    if patch.get("product_id") is not None and not db.session.get(Product, patch["product_id"]):
        raise ValidationError("Product not found")

    request = CustomRequest(
        buyer_id=buyer_id,
        status=STATUS_NEW,
        ai_preview_notes=DEFAULT_PREVIEW_NOTES,
        **patch,
    )
    db.session.add(request)
    db.session.commit()
    return request.to_dict()


def accept_quote(buyer_id: int, request_id: int) -> dict:
    """
    quoted -> accepted.

    Inserts the linked order and flips the status in one transaction.
    Returns {"request": ..., "order": ...}.
    """
    request = db.session.query(CustomRequest).filter_by(id=request_id, buyer_id=buyer_id).first()
    if not request:
        raise CustomRequestError("Custom request not found")

    if request.status != STATUS_QUOTED:
        raise CustomRequestError(
            f"Only quoted requests can be accepted (status is {request.status})",
            details={"status": request.status},
        )
    if not request.quote_amount:
        raise CustomRequestError("Request has no quote to accept")
    if request.seller_id is None:
        raise CustomRequestError("Request has no seller")

    order = Order(
        buyer_id=buyer_id,
        seller_id=request.seller_id,
        items=[{
            "product_id": None,
            "title": "Custom Order",
            "quantity": 1,
            "price": request.quote_amount,
        }],
        subtotal=request.quote_amount,
        total=request.quote_amount,
        custom_request_id=request.id,
        status=ORDER_STATUS_PLACED,
    )
    db.session.add(order)
    request.status = STATUS_ACCEPTED
    db.session.commit()

    return {"request": request.to_dict(), "order": order.to_dict()}
