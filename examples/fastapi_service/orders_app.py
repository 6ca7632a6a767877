"""
Order service rescuing domain errors into HTTP responses.

This example demonstrates:
- Declaring rescue handlers on a RequestRescuer subclass with @rescue_from
- A handler declared by name for an exception type defined elsewhere
- Falling back to the cause when an error wraps a handleable one

Usage:
------
1. pip install -e ".[test]" uvicorn
2. uvicorn examples.fastapi_service.orders_app:app
3. curl localhost:8000/orders/404
"""

import logging

from fastapi import FastAPI

from rescuable import rescue_from
from rescuable.fastapi import RequestRescuer, install_rescue_middleware

logger = logging.getLogger(__name__)


class OrderNotFound(Exception):
    pass


class PaymentDeclined(Exception):
    pass


class OrdersRescuer(RequestRescuer):
    @rescue_from(OrderNotFound)
    def order_not_found(self, error):
        self.render_error(error, status_code=404)

    @rescue_from(PaymentDeclined)
    def payment_declined(self, error):
        logger.info(f"Payment declined on {self.request.url.path}: {error}")
        self.render({"retry": False, "reason": str(error)}, status_code=402)


# Resolved when an error is dispatched, so the name may refer to a module that
# is not installed
OrdersRescuer.rescue_from("stripe.error.CardError", handler="payment_declined")

ORDERS = {1: {"id": 1, "total": 42}}

app = FastAPI()
install_rescue_middleware(app, OrdersRescuer)


@app.get("/orders/{order_id}")
async def get_order(order_id: int):
    if order_id not in ORDERS:
        raise OrderNotFound(f"order {order_id} does not exist")
    return ORDERS[order_id]


@app.post("/orders/{order_id}/pay")
async def pay_order(order_id: int):
    try:
        raise PaymentDeclined("card expired")
    except PaymentDeclined as e:
        raise RuntimeError(f"checkout of order {order_id} failed") from e
