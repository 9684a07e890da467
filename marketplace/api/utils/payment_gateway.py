# marketplace/api/utils/payment_gateway.py
import json
import urllib.error
import urllib.parse
import urllib.request
from decimal import Decimal

from flask import current_app

from marketplace.errors import ApiError


class PaymentGatewayError(ApiError):
    def __init__(self, message: str):
        super().__init__(502, message)


def _call(req: urllib.request.Request) -> dict:
    timeout = current_app.config.get("PAYMENT_TIMEOUT", 10)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise PaymentGatewayError(f"Payment gateway responded with HTTP {e.code}")
    except (urllib.error.URLError, TimeoutError) as e:
        raise PaymentGatewayError(f"Payment gateway unreachable: {e}")

    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise PaymentGatewayError("Payment gateway returned a non-JSON response")


def initiate_payment(amount, transaction_id: str, customer, order_id: int) -> dict:
    """
    Open a payment session for the order and return the gateway response.
    The response carries ``payment_url``, where the customer is redirected to pay.
    """
    cfg = current_app.config
    payload = {
        "store_id": cfg.get("PAYMENT_STORE_ID"),
        "signature_key": cfg.get("PAYMENT_SIGNATURE_KEY"),
        "tran_id": transaction_id,
        "success_url": cfg.get("PAYMENT_SUCCESS_URL"),
        "fail_url": cfg.get("PAYMENT_FAIL_URL"),
        "cancel_url": cfg.get("PAYMENT_CANCEL_URL"),
        "amount": f"{Decimal(str(amount)):.2f}",
        "currency": cfg.get("PAYMENT_CURRENCY", "BDT"),
        "desc": f"Order #{order_id}",
        "cus_name": getattr(customer, "name", None) or "Customer",
        "cus_email": getattr(customer, "email", None),
        "cus_add1": getattr(customer, "address", None) or "N/A",
        "cus_phone": getattr(customer, "phone", None) or "N/A",
        "opt_a": str(order_id),
        "type": "json",
    }
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        cfg.get("PAYMENT_INIT_URL"),
        data=data,
        method="POST",
        headers={"Content-Type": "application/json"},
    )

    current_app.logger.info("[PAYMENT] initiate txn=%s order=%s amount=%s", transaction_id, order_id, payload["amount"])
    result = _call(req)
    if not result.get("payment_url"):
        current_app.logger.error("[PAYMENT] initiate failed txn=%s response=%r", transaction_id, result)
        raise PaymentGatewayError("Payment gateway did not return a payment URL")
    return result


def verify_payment(transaction_id: str) -> dict:
    """Ask the gateway for the final state of a transaction (``pay_status``)."""
    cfg = current_app.config
    query = urllib.parse.urlencode({
        "request_id": transaction_id,
        "store_id": cfg.get("PAYMENT_STORE_ID"),
        "signature_key": cfg.get("PAYMENT_SIGNATURE_KEY"),
        "type": "json",
    })
    req = urllib.request.Request(f"{cfg.get('PAYMENT_VERIFY_URL')}?{query}", method="GET")
    result = _call(req)
    current_app.logger.info("[PAYMENT] verify txn=%s pay_status=%r", transaction_id, result.get("pay_status"))
    return result
