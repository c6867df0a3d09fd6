"""
Reference seller.

A seller that bills every order correctly, using the same pricing rules
as the buyer. Handy to try the marketplace locally and for end-to-end
tests.

Endpoints (relative to the seller's registered URL):
- POST /order     (Answer {"total": ...})
- POST /feedback  (Record the marketplace's feedback)
"""

from collections import deque
from typing import Optional

import structlog
from fastapi import FastAPI, HTTPException, Request

from ..buyer.orders import OrderService
from ..buyer.reductions import reduction_named
from ..infrastructure.countries import Countries
from ..infrastructure.message_schemas import Feedback, FeedbackType, Order

logger = structlog.get_logger()

FEEDBACK_HISTORY = 100


def create_seller_app(
    name: str = "reference-seller",
    countries: Optional[Countries] = None,
) -> FastAPI:
    """Create a reference seller app."""
    app = FastAPI(
        title=f"Reference seller ({name})",
        description="Answers orders with the correct bill.",
        version="0.1.0",
    )
    app.state.name = name
    app.state.biller = OrderService(countries or Countries())
    app.state.feedback = deque(maxlen=FEEDBACK_HISTORY)

    @app.post("/order")
    async def order(order: Order, request: Request):
        """Bill an order."""
        biller: OrderService = request.app.state.biller
        try:
            bill = biller.bill(order, reduction_named(order.reduction))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        logger.debug("reference_seller.billed", seller=name, total=bill.total)
        return bill.model_dump()

    @app.post("/feedback")
    async def feedback(message: Feedback, request: Request):
        """Record feedback from the marketplace."""
        request.app.state.feedback.append(message)
        if message.type == FeedbackType.ERROR:
            logger.warning("reference_seller.feedback", seller=name, content=message.content)
        else:
            logger.info("reference_seller.feedback", seller=name, content=message.content)
        return {"received": True}

    return app


def run_seller(name: str = "reference-seller", host: str = "0.0.0.0", port: int = 3001):
    """Run a reference seller."""
    import uvicorn
    uvicorn.run(create_seller_app(name), host=host, port=port)
