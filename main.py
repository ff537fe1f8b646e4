# src/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from users.routes import router as users_router
from vehicles.routes import router as vehicles_router
from subscription.routes import router as subscription_router
from payment.routes import router as payment_router
from washes.routes import router as washes_router
from dashboard.routes import router as dashboard_router
from admin.routes import router as admin_router
from database import Database, seed_plans
from config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and reconcile the plan catalog; dispose the engine on exit."""
    db_manager: Database = app.state.database
    db_manager.create_all()
    db = db_manager.session()
    try:
        changed = seed_plans(db, settings.SUBSCRIPTION_PLANS)
        logger.info(f"Plan catalog reconciled, {changed} plan(s) written")
    finally:
        db.close()
    yield
    db_manager.dispose()


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the API around an explicitly constructed database."""
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="CSR Portal Backend",
        description="Customer service API for a subscription car wash",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(dashboard_router)
    app.include_router(users_router)
    app.include_router(vehicles_router)
    app.include_router(subscription_router)
    app.include_router(payment_router)
    app.include_router(washes_router)
    app.include_router(admin_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": "Welcome to the CSR Portal Backend!"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
