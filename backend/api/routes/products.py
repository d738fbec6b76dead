from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_product_repo
from api.schemas.product import ProductListResponse, RecommendationRequest
from loanchat.database.product_repository import ProductRepository
from loanchat.model.product import Product

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
def list_products(
    search: Optional[str] = None,
    min_apr: Optional[float] = Query(default=None, ge=0),
    max_apr: Optional[float] = Query(default=None, ge=0),
    income: Optional[float] = Query(default=None, ge=0),
    credit_score: Optional[int] = Query(default=None, ge=0),
    repo: ProductRepository = Depends(get_product_repo),
):
    """Browse and filter all products."""
    data = repo.list_products(
        search=search,
        min_apr=min_apr,
        max_apr=max_apr,
        income=income,
        credit_score=credit_score,
    )
    return ProductListResponse(data=data)


@router.post("/recommendations", response_model=ProductListResponse)
def recommend_products(
    body: RecommendationRequest,
    repo: ProductRepository = Depends(get_product_repo),
):
    """Products the applicant qualifies for, lowest APR first."""
    data = repo.recommend(
        loan_type=body.loan_type,
        max_apr=body.max_apr,
        monthly_income=body.monthly_income,
        credit_score=body.credit_score,
    )
    return ProductListResponse(data=data)


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: str,
    repo: ProductRepository = Depends(get_product_repo),
):
    product = repo.get_product_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
