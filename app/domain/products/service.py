"""Product service - catalogue and variant management"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import OrderItem, Product, ProductVariant
from .schemas import (
    GenerateVariantsRequest,
    ProductCreate,
    ProductUpdate,
    ProductVariantUpdate,
    VariantGroup,
)
from .variants import (
    VariantCombination,
    VariantGenerationError,
    generate_combinations,
    remove_group,
    remove_option,
)

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> list[Product]:
        query = self.db.query(Product)
        if search:
            query = query.filter(Product.name.ilike(f"%{search}%"))
        if category:
            query = query.filter(Product.category == category)
        if is_active is not None:
            query = query.filter(Product.is_active == is_active)
        return query.order_by(Product.name.asc()).all()

    def get_product(self, product_id: int) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return product

    def create_product(self, data: ProductCreate) -> Product:
        if self.db.query(Product).filter(Product.slug == data.slug).first():
            raise HTTPException(status_code=409, detail="A product with this slug already exists")

        payload = data.model_dump()
        product = Product(**payload)
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"✅ Created product {product.slug}")
        return product

    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = self.get_product(product_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(product, key, value)
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_groups(self, product: Product) -> list[VariantGroup]:
        return [VariantGroup.model_validate(g) for g in product.variant_groups or []]

    def _save_groups(self, product: Product, groups: list[VariantGroup]) -> None:
        product.variant_groups = [g.model_dump() for g in groups]

    def preview_variants(
        self, product_id: int, request: GenerateVariantsRequest
    ) -> list[VariantCombination]:
        """Combinations that would be created, without persisting"""
        product = self.get_product(product_id)
        groups = request.groups if request.groups is not None else self.get_groups(product)
        base_price = request.base_price if request.base_price is not None else product.base_price

        try:
            return generate_combinations(
                product.slug,
                groups,
                base_price,
                existing=[v.group_combinations or [] for v in product.variants],
            )
        except VariantGenerationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    def create_variants(
        self, product_id: int, request: GenerateVariantsRequest
    ) -> list[ProductVariant]:
        """Generate and store new combinations; SKUs already in use are skipped"""
        product = self.get_product(product_id)
        combinations = self.preview_variants(product_id, request)
        if request.groups is not None:
            self._save_groups(product, request.groups)

        # Rows added in this batch are not flushed, so taken SKUs are tracked here
        taken_skus = {
            sku
            for (sku,) in self.db.query(ProductVariant.sku)
            .filter(ProductVariant.sku.in_([c.sku for c in combinations]))
            .all()
        }
        created = []
        for combo in combinations:
            if combo.sku in taken_skus:
                logger.warning(f"⚠️ SKU {combo.sku} already exists, skipping")
                continue
            taken_skus.add(combo.sku)
            variant = ProductVariant(
                product_id=product.id,
                sku=combo.sku,
                display_name=combo.display_name,
                group_combinations=combo.group_combinations,
                stock=combo.stock,
                price=combo.price,
                is_active=combo.is_active,
            )
            self.db.add(variant)
            created.append(variant)

        self.db.commit()
        for variant in created:
            self.db.refresh(variant)
        logger.info(f"✅ Generated {len(created)} variants for product {product.slug}")
        return created

    def list_variants(self, product_id: int) -> list[ProductVariant]:
        product = self.get_product(product_id)
        return sorted(product.variants, key=lambda v: v.id)

    def get_variant(self, variant_id: int) -> ProductVariant:
        variant = self.db.query(ProductVariant).filter(ProductVariant.id == variant_id).first()
        if not variant:
            raise HTTPException(status_code=404, detail="Variant not found")
        return variant

    def update_variant(self, variant_id: int, data: ProductVariantUpdate) -> ProductVariant:
        variant = self.get_variant(variant_id)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("sku") and updates["sku"] != variant.sku:
            if self.db.query(ProductVariant).filter(ProductVariant.sku == updates["sku"]).first():
                raise HTTPException(status_code=409, detail="SKU already in use")

        for key, value in updates.items():
            setattr(variant, key, value)
        self.db.commit()
        self.db.refresh(variant)
        return variant

    def delete_variant(self, variant_id: int) -> None:
        variant = self.get_variant(variant_id)
        self._delete_variants([variant])
        self.db.commit()

    def _delete_variants(self, variants: list[ProductVariant]) -> None:
        for variant in variants:
            in_orders = (
                self.db.query(OrderItem).filter(OrderItem.variant_id == variant.id).count()
            )
            if in_orders:
                # Ordered variants are kept for history, only hidden
                variant.is_active = False
            else:
                self.db.delete(variant)

    def delete_group(self, product_id: int, group_id: str) -> Product:
        product = self.get_product(product_id)
        groups = self.get_groups(product)
        if not any(g.id == group_id for g in groups):
            raise HTTPException(status_code=404, detail="Variant group not found")

        updated, kept = remove_group(groups, product.variants, group_id)
        self._delete_variants([v for v in product.variants if v not in kept])
        self._save_groups(product, updated)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete_option(self, product_id: int, group_id: str, option_id: str) -> Product:
        product = self.get_product(product_id)
        groups = self.get_groups(product)
        group = next((g for g in groups if g.id == group_id), None)
        if not group or not any(o.id == option_id for o in group.options):
            raise HTTPException(status_code=404, detail="Variant option not found")

        updated, kept = remove_option(groups, product.variants, group_id, option_id)
        self._delete_variants([v for v in product.variants if v not in kept])
        self._save_groups(product, updated)
        self.db.commit()
        self.db.refresh(product)
        return product
