from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class Product(BaseModel):
    """
    Loan product, read-only for the chat flow.
    """

    id: str
    name: str
    bank: str
    type: Optional[str] = None  # personal | education | vehicle | home | credit_line | debt_consolidation

    rate_apr: float
    min_income: float
    min_credit_score: int

    tenure_min_months: Optional[int] = None
    tenure_max_months: Optional[int] = None

    processing_fee_pct: Optional[float] = None
    prepayment_allowed: Optional[bool] = None

    disbursal_speed: Optional[str] = None  # instant | fast | standard
    docs_level: Optional[str] = None  # minimal | standard | high

    summary: Optional[str] = None
    faq: Optional[List[Any]] = None
    terms: Optional[Dict[str, Any]] = None

    model_config = {
        "str_strip_whitespace": True,
        "extra": "ignore",
        "from_attributes": True,
    }
