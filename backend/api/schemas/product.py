from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field

from loanchat.model.product import Product


class RecommendationRequest(BaseModel):
    loan_type: str = Field(min_length=1)
    max_apr: float = Field(default=15, ge=0, le=100)
    monthly_income: float = Field(default=0, ge=0)
    credit_score: int = Field(default=700, ge=300, le=900)


class ProductListResponse(BaseModel):
    data: List[Product]
