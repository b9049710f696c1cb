"""
Domain and repository exceptions

HTTP status mapping lives in apps/api/main.py; nothing here knows about HTTP.
"""


class StorefrontError(Exception):
    """Base class for all storefront errors"""


class RepositoryError(StorefrontError):
    """A database operation failed (original exception chained as __cause__)"""


class CategoryNotFoundError(StorefrontError):
    """No active category with the given slug"""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Category not found: {slug}")


class CartItemNotFoundError(StorefrontError):
    """Cart mutation referenced an item that is not in the cart"""

    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Item not found in cart: {item_id}")


class InvalidLineItemError(StorefrontError):
    """Line item failed boundary validation (e.g. quantity < 1)"""


class ProductNotFoundError(StorefrontError):
    """No active product with the given id"""

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class CouponNotFoundError(StorefrontError):
    """Coupon code is unknown, inactive or expired"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon not found: {code}")
