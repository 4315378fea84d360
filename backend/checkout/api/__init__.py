"""API module."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from checkout.api.routes import callback, health, payments


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    from checkout.services import get_payment_flow_service

    await get_payment_flow_service().client.aclose()


def create_api() -> FastAPI:
    """Create FastAPI application for the hosted checkout service."""
    app = FastAPI(
        title="Hosted Checkout API",
        description="Payment initiation, callback correlation and status polling",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(payments.router)
    app.include_router(callback.router)

    return app


__all__ = ["create_api"]
