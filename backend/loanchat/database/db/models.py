from sqlalchemy import (
    Column,
    Text,
    DateTime,
    Boolean,
    Float,
    Integer,
    JSON,
    Index,
)
from sqlalchemy.orm import declarative_base

from loanchat.model.chat import utcnow


Base = declarative_base()


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    bank = Column(Text, nullable=False)
    type = Column(Text, index=True)

    rate_apr = Column(Float, nullable=False)
    min_income = Column(Float, nullable=False)
    min_credit_score = Column(Integer, nullable=False)

    tenure_min_months = Column(Integer)
    tenure_max_months = Column(Integer)

    processing_fee_pct = Column(Float)
    prepayment_allowed = Column(Boolean)

    disbursal_speed = Column(Text)
    docs_level = Column(Text)

    summary = Column(Text)
    faq = Column(JSON)
    terms = Column(JSON)


class ChatMessageRow(Base):
    """Append-only chat log"""
    __tablename__ = "ai_chat_messages"

    id = Column(Text, primary_key=True)  # UUID, generated by the writer
    user_id = Column(Text, nullable=True)
    product_id = Column(Text, nullable=True)

    role = Column(Text, nullable=False)  # user | assistant
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ai_chat_messages_conversation", "product_id", "user_id", "created_at"),
    )
