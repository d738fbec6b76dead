"""Shared fixtures for the test suite: in-memory database and sample products."""

from types import SimpleNamespace

from loanchat.database.db.session import create_db_engine, create_session_factory, init_schema
from loanchat.model.product import Product


def make_session_factory():
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_db_engine("sqlite://")
    init_schema(engine)
    return create_session_factory(engine)


def make_product(**overrides) -> Product:
    data = {
        "id": "prod-1",
        "name": "Flexi Personal Loan",
        "bank": "HDFC Bank",
        "type": "personal",
        "rate_apr": 10.5,
        "min_income": 25000,
        "min_credit_score": 700,
        "processing_fee_pct": 1.5,
        "prepayment_allowed": True,
        "disbursal_speed": "instant",
    }
    data.update(overrides)
    return Product(**data)


def completion_response(text):
    """Shape of a LiteLLM completion response, as far as the client reads it."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))]
    )
