"""
Registration and leaderboard API.

Endpoints:
- POST /seller    (Register a seller: {"name": ..., "url": ...})
- GET  /sellers   (Leaderboard, richest first)
- GET  /status    (Dispatcher status)
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.message_schemas import SellerRegistration
from ..orchestration.dispatcher import Dispatcher
from ..sellers.models import Seller
from ..sellers.service import SellerService


def seller_view(seller: Seller) -> dict:
    """Public representation of a seller."""
    return {
        "name": seller.name,
        "url": seller.url,
        "cash": seller.cash,
        "online": seller.online,
    }


def create_app(
    seller_service: SellerService,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """Create the API bound to a seller service (and optionally a dispatcher)."""
    app = FastAPI(
        title="Marketplace Load Generator",
        description="Register sellers and follow their earnings while orders are dispatched.",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.seller_service = seller_service
    app.state.dispatcher = dispatcher

    @app.post("/seller", status_code=201)
    async def register_seller(registration: SellerRegistration, request: Request):
        """Register (or re-register) a seller endpoint."""
        service: SellerService = request.app.state.seller_service
        try:
            seller = service.register(registration.url, registration.name)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return seller_view(seller)

    @app.get("/sellers")
    async def list_sellers(request: Request):
        """Sellers sorted by cash, highest first."""
        service: SellerService = request.app.state.seller_service
        return [seller_view(s) for s in service.leaderboard()]

    @app.get("/status")
    async def status(request: Request):
        """Dispatcher and directory status."""
        service: SellerService = request.app.state.seller_service
        current: Optional[Dispatcher] = request.app.state.dispatcher
        return {
            "sellers": len(service.all_sellers()),
            "dispatcher": current.get_status() if current else None,
        }

    return app
