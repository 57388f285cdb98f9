"""Sample catalog for development databases."""

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.shared.helpers import get_or_create_category
from storefront.db.models import Product, ProductImage
from storefront.logging_config import get_logger

logger = get_logger(__name__)

SEED_STOCK = 50

SEED_CATEGORIES = [
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Toys",
    "Health & Beauty",
    "Automotive",
]


def _unsplash(photo: str) -> str:
    return f"https://images.unsplash.com/{photo}?w=800"


@dataclass(frozen=True)
class SeedProduct:
    title: str
    description: str
    price: int
    category: str
    images: list[str] = field(default_factory=list)

    @property
    def thumbnail(self) -> str:
        return self.images[0]


SEED_PRODUCTS = [
    SeedProduct(
        "Wireless Bluetooth Headphones",
        "Noise-cancelling over-ear headphones with 30-hour battery life and soft ear cushions.",
        7999,
        "Electronics",
        [_unsplash("photo-1505740420928-5e560c06d30e"), _unsplash("photo-1484704849700-f032a568e944")],
    ),
    SeedProduct(
        "Smart Watch Pro",
        "Fitness tracking, heart rate monitor, GPS and phone notifications. Water-resistant to 50m.",
        24999,
        "Electronics",
        [_unsplash("photo-1523275335684-37898b6baf30")],
    ),
    SeedProduct(
        "4K Ultra HD Webcam",
        "Auto-focus webcam with built-in microphone and adjustable lighting.",
        12999,
        "Electronics",
        [_unsplash("photo-1587825140708-dfaf72ae4b04")],
    ),
    SeedProduct(
        "Classic Denim Jacket",
        "Premium cotton denim jacket with a modern fit.",
        5999,
        "Clothing",
        [_unsplash("photo-1551028719-00167b16eac5")],
    ),
    SeedProduct(
        "Premium Cotton T-Shirt",
        "Soft, breathable organic cotton t-shirt for everyday wear.",
        1999,
        "Clothing",
        [_unsplash("photo-1521572163474-6864f9cf17ab")],
    ),
    SeedProduct(
        "The Art of Programming",
        "A guide to algorithms, data structures and working practices of software development.",
        3999,
        "Books",
        [_unsplash("photo-1532012197267-da84d127e765")],
    ),
    SeedProduct(
        "Smart LED Light Bulbs (4-Pack)",
        "Wi-Fi color-changing LED bulbs controlled from a phone app.",
        4999,
        "Home & Garden",
        [_unsplash("photo-1550985616-10810253b84d")],
    ),
    SeedProduct(
        "Indoor Plant Collection",
        "Three easy-care indoor plants with decorative pots.",
        3499,
        "Home & Garden",
        [_unsplash("photo-1485955900006-10f4d324d411")],
    ),
    SeedProduct(
        "Yoga Mat Premium",
        "Non-slip, cushioned yoga mat with carrying strap.",
        3999,
        "Sports",
        [_unsplash("photo-1601925260368-ae2f83cf8b7f")],
    ),
    SeedProduct(
        "Educational Building Blocks",
        "200-piece building block set. Ages 3+.",
        2499,
        "Toys",
        [_unsplash("photo-1587654780291-39c9404d746b")],
    ),
    SeedProduct(
        "Skincare Gift Set",
        "Cleanser, toner, serum and moisturizer for all skin types.",
        5999,
        "Health & Beauty",
        [_unsplash("photo-1556228578-0d85b1a4d571")],
    ),
    SeedProduct(
        "Car Phone Mount",
        "Dashboard and windshield phone holder with 360-degree rotation.",
        1999,
        "Automotive",
        [_unsplash("photo-1519641471654-76ce0107ad1b")],
    ),
]


@dataclass
class SeedResult:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


async def seed_catalog(db: AsyncSession) -> SeedResult:
    """Create the sample categories and products.

    Products are matched by title, so running this twice creates nothing
    the second time. The caller commits.
    """
    result = SeedResult()

    for name in SEED_CATEGORIES:
        await get_or_create_category(db, name)

    for item in SEED_PRODUCTS:
        existing = await db.scalar(select(Product.id).where(Product.title == item.title))
        if existing:
            result.skipped.append(item.title)
            continue

        category = await get_or_create_category(db, item.category)
        db.add(
            Product(
                title=item.title,
                description=item.description,
                price=item.price,
                stock=SEED_STOCK,
                is_active=True,
                thumbnail=item.thumbnail,
                category_id=category.id,
                images=[
                    ProductImage(url=url, position=index)
                    for index, url in enumerate(item.images)
                ],
            )
        )
        await db.flush()
        result.created.append(item.title)

    logger.info(
        "Seeded catalog",
        extra={"created": len(result.created), "skipped": len(result.skipped)},
    )
    return result
