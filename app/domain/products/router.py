"""Product router - catalogue and variant endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    CombinationResponse,
    GenerateVariantsRequest,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProductVariantResponse,
    ProductVariantUpdate,
)
from .service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])
variants_router = APIRouter(prefix="/product-variants", tags=["Products"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency injection for ProductService"""
    return ProductService(db)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    return service.list_products(search, category, is_active)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(data: ProductCreate, service: ProductService = Depends(get_product_service)):
    return service.create_product(data)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int, data: ProductUpdate, service: ProductService = Depends(get_product_service)
):
    return service.update_product(product_id, data)


# ============================================================================
# VARIANTS
# ============================================================================


@router.post("/{product_id}/variants/generate", response_model=list[CombinationResponse])
async def preview_variants(
    product_id: int,
    request: GenerateVariantsRequest,
    service: ProductService = Depends(get_product_service),
):
    """Dry run: combinations that don't exist yet for this product"""
    return service.preview_variants(product_id, request)


@router.post("/{product_id}/variants", response_model=list[ProductVariantResponse], status_code=201)
async def create_variants(
    product_id: int,
    request: GenerateVariantsRequest,
    service: ProductService = Depends(get_product_service),
):
    return service.create_variants(product_id, request)


@router.get("/{product_id}/variants", response_model=list[ProductVariantResponse])
async def list_variants(product_id: int, service: ProductService = Depends(get_product_service)):
    return service.list_variants(product_id)


@router.delete("/{product_id}/variant-groups/{group_id}", response_model=ProductResponse)
async def delete_variant_group(
    product_id: int, group_id: str, service: ProductService = Depends(get_product_service)
):
    """Remove a group and the variants built from it"""
    return service.delete_group(product_id, group_id)


@router.delete(
    "/{product_id}/variant-groups/{group_id}/options/{option_id}", response_model=ProductResponse
)
async def delete_variant_option(
    product_id: int,
    group_id: str,
    option_id: str,
    service: ProductService = Depends(get_product_service),
):
    return service.delete_option(product_id, group_id, option_id)


@variants_router.patch("/{variant_id}", response_model=ProductVariantResponse)
async def update_variant(
    variant_id: int,
    data: ProductVariantUpdate,
    service: ProductService = Depends(get_product_service),
):
    return service.update_variant(variant_id, data)


@variants_router.delete("/{variant_id}")
async def delete_variant(variant_id: int, service: ProductService = Depends(get_product_service)):
    service.delete_variant(variant_id)
    return {"message": "Variant deleted successfully"}
