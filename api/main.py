from contextlib import asynccontextmanager

from fastapi import FastAPI

from core import db
from core.logging import configure_logging
from payments import router as payments_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize both DB pools once per process.
    await db.operations_store.init_pool()
    await db.card_store.init_pool()
    try:
        yield
    finally:
        await db.card_store.close_pool()
        await db.operations_store.close_pool()


app = FastAPI(lifespan=lifespan)

app.include_router(payments_router.router, tags=["payments"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "shipment payments api"}
