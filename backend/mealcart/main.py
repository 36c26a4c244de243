"""
# `mealcart/main.py`: application entry point

## Overview
Builds the FastAPI application. It sets up CORS, mounts the cart router, registers the error
handlers, and wires the Firestore-backed `CartService` on startup.

---

## Startup
- `init_firestore()` runs once and creates the Firestore client.
- The `FirestoreCartRepository` and `CartService` are built from it and stored on `app.state`.
- Routes reach the service through `Depends(get_cart_service)`.
- If `create_app()` is given a ready `CartService`, Firestore is not touched at all.

---

## Background scheduler
- **Library:** APScheduler (`AsyncIOScheduler`)
- **Job:** `prune_empty_carts`, which deletes cart documents whose last line was removed
- **Interval:** `EMPTY_CART_SWEEP_MINUTES`. The job is disabled when the value is 0.

---

## Errors
Every error response has the shape `{"success": false, "error": "<message>"}`.
- `CartError` subclasses are returned with their own status code and message.
- Body validation failures return 400.
- Any other exception is logged and returns a 500 with a generic message.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from mealcart.config import Settings, init_firestore, settings
from mealcart.core.errors import CartError, CartValidationError
from mealcart.repositories.carts import FirestoreCartRepository
from mealcart.routers import carts
from mealcart.services.cart_cleanup import prune_empty_carts
from mealcart.services.cart_service import ADD_ITEM_REQUIRED, CartService

logger = logging.getLogger("mealcart.main")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app(cart_service: Optional[CartService] = None, cfg: Settings = settings) -> FastAPI:
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Meal Cart API",
        description="Per-user meal cart backed by Firestore, with subtotal/tax/total on read.",
        version="1.0.0",
        redirect_slashes=False,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(carts.router)

    scheduler = AsyncIOScheduler()
    app.state.cart_service = cart_service
    app.state.scheduler = scheduler

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def alive():
        return "Server is alive!!!"

    @app.exception_handler(CartError)
    async def _cart_error(request: Request, exc: CartError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        message = ADD_ITEM_REQUIRED if request.method == "POST" else CartValidationError.message
        return _error(400, message)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal Server Error")

    @app.on_event("startup")
    async def _startup():
        if app.state.cart_service is not None:
            return
        db = init_firestore(cfg)
        collection = cfg.carts_collection_name
        repository = FirestoreCartRepository(db, collection=collection, default_price=cfg.default_price)
        app.state.cart_service = CartService(repository, tax_rate=cfg.tax_rate)
        logger.info("Cart service ready (collection=%s, price=%.2f, tax=%s)",
                    collection, cfg.default_price, cfg.tax_rate)

        if cfg.empty_cart_sweep_minutes > 0:
            scheduler.add_job(
                prune_empty_carts,
                "interval",
                minutes=cfg.empty_cart_sweep_minutes,
                args=[db, collection],
                id="empty-cart-sweep",
                replace_existing=True,
            )
            scheduler.start()

    @app.on_event("shutdown")
    async def _shutdown():
        if scheduler.running:
            scheduler.shutdown(wait=False)

    return app


app = create_app()

# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mealcart.main:app", host="0.0.0.0", port=settings.port)
