"""Fixture data for the garden-supply shop demo."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """A product in the demo catalogue."""

    slug: str
    name: str
    price_cents: int
    summary: str

    @property
    def price(self) -> str:
        return f"${self.price_cents / 100:.2f}"


@dataclass(frozen=True)
class Post:
    """A blog post."""

    slug: str
    title: str
    body: str


PRODUCTS: list[Product] = [
    Product(
        "heirloom-tomato-seeds",
        "Heirloom Tomato Seeds",
        495,
        "Brandywine, Cherokee Purple and Green Zebra in one packet.",
    ),
    Product(
        "copper-trowel",
        "Copper Trowel",
        3200,
        "A hand-forged trowel that slugs refuse to cross.",
    ),
    Product(
        "worm-bin",
        "Stacking Worm Bin",
        8900,
        "Three trays of vermicomposting for balconies and kitchens.",
    ),
    Product(
        "rain-barrel",
        "Rain Barrel, 200 L",
        11500,
        "Food-grade barrel with a brass spigot and overflow hose.",
    ),
]

PRODUCTS_BY_SLUG: dict[str, Product] = {p.slug: p for p in PRODUCTS}

POSTS: list[Post] = [
    Post(
        "no-dig-beds",
        "Starting a No-Dig Bed",
        "Cardboard, compost, patience. Skip the rototiller this year.",
    ),
    Post(
        "saving-seed",
        "Saving Your Own Seed",
        "Open-pollinated varieties come true from seed. Hybrids do not.",
    ),
]

POSTS_BY_SLUG: dict[str, Post] = {p.slug: p for p in POSTS}

# Raw settings the demo store starts with, in admin-form layout.
DEFAULT_SETTINGS: dict[str, object] = {
    "type": "prerender",
    "eagerness": "moderate",
    "match_urls": "/products/*\n/blog/*",
    "exclude_urls": "/checkout\n/cart",
    "post_types": ["product", "post", "page"],
}

CATEGORIES: list[str] = ["page", "post", "product"]
