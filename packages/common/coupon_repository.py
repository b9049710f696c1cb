"""
Coupon Repository - server-side coupon terms

Clients only ever send a code. Discount, type and minimum order amount come
from the coupons table, so a request cannot choose its own terms. Codes are
stored upper-case and looked up case-insensitively.
"""
import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packages.common.errors import CouponNotFoundError, RepositoryError
from packages.domain.pricing.schemas import Coupon

logger = structlog.get_logger()


def normalize_code(code: str) -> str:
    return code.strip().upper()


class CouponRepository:
    """Coupon lookups (text SQL, stateless)"""

    async def find_active(self, code: str, db: AsyncSession) -> Coupon:
        """
        Resolve a coupon code to its current terms.

        Raises:
            CouponNotFoundError: unknown, inactive or expired code
        """
        code = normalize_code(code)

        query = text("""
            SELECT code, discount, type, min_amount
            FROM coupons
            WHERE code = :code
              AND is_active = TRUE
              AND (expires_at IS NULL OR expires_at > NOW())
        """)

        try:
            result = await db.execute(query, {"code": code})
        except SQLAlchemyError as e:
            logger.error("coupon_lookup_failed", code=code, error=str(e))
            raise RepositoryError(f"Failed to look up coupon {code!r}") from e

        row = result.fetchone()
        if row is None:
            logger.info("coupon_rejected", code=code)
            raise CouponNotFoundError(code)

        return Coupon(**dict(row._mapping))


# Singleton instance
coupon_repository = CouponRepository()
