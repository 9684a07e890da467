# marketplace/api/routes/payment_routes.py
from flask import Blueprint, request

from marketplace.api.utils.responses import send_response
from marketplace.services.payment_service import confirm_payment

payment_bp = Blueprint("payment_bp", __name__, url_prefix="/api/payment")


@payment_bp.route("/confirmation", methods=["GET", "POST"])
def payment_confirmation():
    """
    GET|POST /api/payment/confirmation?transactionId=TXN-...&status=success
    Gateway redirect target; the gateway may also POST the same fields as a form.
    """
    transaction_id = (
        request.args.get("transactionId")
        or request.form.get("mer_txnid")
        or request.form.get("transactionId")
        or ""
    ).strip()
    outcome = request.args.get("status") or request.form.get("status") or ""
    order = confirm_payment(transaction_id, outcome)
    return send_response(order, f"Payment status: {order['paymentStatus']}")
