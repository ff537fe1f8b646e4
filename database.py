# src/database.py
import logging
from decimal import Decimal
from typing import Generator, Iterable, Mapping, Any, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and session factory for one process.

    Built once at startup and disposed on shutdown; request handlers reach it
    through ``request.app.state.database``.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(url, echo=echo, future=True, connect_args=connect_args)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        """Create all tables (development and tests)."""
        # Import models so every table is registered on Base.metadata.
        import users.models  # noqa: F401
        import vehicles.models  # noqa: F401
        import subscription.models  # noqa: F401
        import payment.models  # noqa: F401
        import washes.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session bound to the application's database."""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()


def seed_plans(db: Session, catalog: Iterable[Mapping[str, Any]]) -> int:
    """Reconcile the subscription_plans table with the configured catalog.

    Missing plans are inserted and drifted price/quota/description values are
    overwritten. Returns the number of rows inserted or updated.
    """
    from subscription.models import SubscriptionPlan

    changed = 0
    for entry in catalog:
        plan: Optional[SubscriptionPlan] = db.get(SubscriptionPlan, entry["id"])
        price = Decimal(str(entry["price"]))
        if plan is None:
            db.add(SubscriptionPlan(
                id=entry["id"],
                name=entry["name"],
                description=entry.get("description"),
                price=price,
                washes_per_month=entry["washes_per_month"],
                is_active=True,
            ))
            changed += 1
            continue
        if (
            plan.price != price
            or plan.washes_per_month != entry["washes_per_month"]
            or plan.description != entry.get("description")
        ):
            logger.info(f"Plan {plan.id} ({plan.name}) drifted from catalog, updating")
            plan.price = price
            plan.washes_per_month = entry["washes_per_month"]
            plan.description = entry.get("description")
            changed += 1
    db.commit()
    return changed
