# marketplace/services/payment_service.py
from __future__ import annotations

from flask import current_app

from marketplace.api.utils.payment_gateway import verify_payment
from marketplace.api.utils.serializers import order_dict
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import Order, PaymentStatus

GATEWAY_SUCCESS = "Successful"
GATEWAY_FAILURES = ("Failed", "Cancelled", "Canceled", "Expired")


def confirm_payment(transaction_id: str, outcome: str) -> dict:
    """
    Called when the gateway redirects the customer back.

    The redirect itself is unauthenticated, so ``outcome`` is never trusted:
    the gateway is asked for the transaction state and only its answer moves
    the order to PAID or FAILED. Anything else leaves payment PENDING, and an
    already paid order is left untouched.
    """
    if not transaction_id:
        raise ApiError(400, "Missing 'transactionId'")

    order = Order.query.filter_by(transaction_id=transaction_id).first()
    if not order:
        raise ApiError(404, f"Order with transaction {transaction_id} not found")

    if order.payment_status == PaymentStatus.PAID:
        return order_dict(order)

    pay_status = verify_payment(transaction_id).get("pay_status")
    if pay_status == GATEWAY_SUCCESS:
        new_status = PaymentStatus.PAID
    elif pay_status in GATEWAY_FAILURES:
        new_status = PaymentStatus.FAILED
    else:
        current_app.logger.warning(
            "[PAYMENT] order=%s txn=%s redirect=%r not confirmed by gateway (pay_status=%r)",
            order.id, transaction_id, outcome, pay_status,
        )
        return order_dict(order)

    order.payment_status = new_status
    db.session.commit()
    current_app.logger.info("[PAYMENT] order=%s txn=%s redirect=%r -> %s", order.id, transaction_id, outcome, new_status)
    return order_dict(order)
