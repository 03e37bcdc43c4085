import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from config import APP_HOST, APP_PORT, DEBUG, LOG_LEVEL, SCHEDULER_ENABLED
from database.init import Base, engine
from exceptions import WarehouseError
from responses.error import domain_error
from routes import (
    auth_routes,
    booking_routes,
    electricity_routes,
    pricing_routes,
    quote_routes,
    report_routes,
    stock_routes,
    warehouse_routes,
)
from services.background_tasks import BackgroundTasks

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    background_tasks = None
    if SCHEDULER_ENABLED:
        background_tasks = BackgroundTasks()
        background_tasks.start()
    yield
    if background_tasks is not None:
        background_tasks.shutdown()


app = FastAPI(title="Warehouse Rental API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WarehouseError)
async def warehouse_error_handler(request: Request, exc: WarehouseError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return domain_error(exc)


app.include_router(auth_routes.router)
app.include_router(warehouse_routes.router)
app.include_router(booking_routes.router)
app.include_router(pricing_routes.router)
app.include_router(quote_routes.router)
app.include_router(stock_routes.router)
app.include_router(electricity_routes.router)
app.include_router(report_routes.router)


@app.get("/")
def read_root():
    return {"name": "Warehouse Rental API", "version": "1.0.0"}


if __name__ == "__main__":
    uvicorn.run("main:app", host=APP_HOST, port=APP_PORT, reload=DEBUG)
