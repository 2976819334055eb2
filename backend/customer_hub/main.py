"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .core import CustomerContextMiddleware
from .database import AsyncSessionLocal, init_db, dispose_db
from .errors import register_exception_handlers
from .logging_config import get_logger, setup_logging
from .services import CustomerService
from .api.routes import customers, connections, data

logger = get_logger(__name__)


async def _seed_demo_customers():
    async with AsyncSessionLocal() as db:
        inserted = await CustomerService(db).seed_demo_customers()
        await db.commit()
    return inserted


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    if get_settings().seed_demo_customers:
        await _seed_demo_customers()
    logger.info("customer hub started", devlake_api_url=get_settings().devlake_api_url)
    yield
    await dispose_db()


app = FastAPI(
    title="CustomerHub API",
    description="Multi-customer layer over the DevLake REST API",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(CustomerContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(customers.router)
app.include_router(connections.router)
app.include_router(data.router)


@app.get("/health")
def health():
    return {"status": "ok"}
