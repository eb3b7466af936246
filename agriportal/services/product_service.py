import re
from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.core.formatting import format_price
from agriportal.models.product import Product
from agriportal.models.user import User
from agriportal.repositories.product_repository import ProductRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.product import ProductOut


def get_zalo_link(contact: str | None) -> str | None:
    """Zalo chat link for a phone contact, in local 0xxxxxxxxx form"""
    if not contact:
        return None
    digits = re.sub(r"\D", "", contact)
    if not digits:
        return None
    if digits.startswith("84"):
        digits = digits[2:]
    if not digits.startswith("0"):
        digits = "0" + digits
    return f"https://zalo.me/{digits}"


class ProductService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.products = ProductRepository(db)

    async def decorate(self, products: list[Product]) -> list[ProductOut]:
        usernames = await UserRepository(self.db).usernames_by_ids({p.user_id for p in products})
        return [
            ProductOut.model_validate(p).model_copy(update={
                "seller_username": usernames.get(p.user_id),
                "formatted_price": format_price(p.price),
                "zalo_link": get_zalo_link(p.contact),
            })
            for p in products
        ]

    async def create_product(self, seller: User, data: dict[str, Any]) -> ProductOut:
        product = await self.products.create(Product(user_id=seller.id, views_count=0, **data))
        return (await self.decorate([product]))[0]

    async def list_products(self, category: str | None = None, limit: int = 20, offset: int = 0) -> list[ProductOut]:
        products = await self.products.list(category=category, limit=limit, offset=offset, exclude_rejected=True)
        return await self.decorate(products)

    async def get_product(self, product_id: int) -> ProductOut | None:
        product = await self.products.get_by_id(product_id)
        return (await self.decorate([product]))[0] if product else None

    async def _owned(self, user: User, product_id: int) -> Product | None:
        product = await self.products.get_by_id(product_id)
        if product is None:
            return None
        if product.user_id != user.id:
            raise PermissionError("Bạn không có quyền chỉnh sửa sản phẩm này")
        return product

    async def update_product(self, user: User, product_id: int, updates: dict[str, Any]) -> ProductOut | None:
        product = await self._owned(user, product_id)
        if product is None:
            return None
        for key, value in updates.items():
            if value is not None:
                setattr(product, key, value)
        product = await self.products.update(product)
        return (await self.decorate([product]))[0]

    async def delete_product(self, user: User, product_id: int) -> bool:
        product = await self._owned(user, product_id)
        if product is None:
            return False
        await self.products.delete(product)
        return True

    async def track_view(self, product_id: int) -> int | None:
        product = await self.products.get_by_id(product_id)
        if product is None:
            return None
        product.views_count = (product.views_count or 0) + 1
        product = await self.products.update(product)
        return product.views_count
