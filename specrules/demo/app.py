"""Garden-supply shop demo website.

Every HTML route sets ``request.state.speculation_category`` the way a CMS
would expose its post type. Listing pages leave it unset, so they always
receive the rules. The settings page lives at ``/admin/speculation-rules``.
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse

from specrules.cache import RuleCache
from specrules.demo.data import (
    CATEGORIES,
    DEFAULT_SETTINGS,
    POSTS,
    POSTS_BY_SLUG,
    PRODUCTS,
    PRODUCTS_BY_SLUG,
    Product,
)
from specrules.store import InMemorySettingsStore, SettingsStore
from specrules.web import SpeculationRulesMiddleware, create_admin_router

# ── HTML helpers ────────────────────────────────────────────────────

_CSS = """\
body { font-family: Georgia, serif; max-width: 880px; margin: 2em auto;
       padding: 0 1em; color: #2d2a24; background: #fbfaf5; }
h1 { color: #3f6b2a; border-bottom: 2px solid #3f6b2a; padding-bottom: .3em; }
nav { background: #3f6b2a; padding: .8em 1.2em; margin-bottom: 1.5em;
      border-radius: 4px; }
nav a { color: #fff; text-decoration: none; margin-right: 1.5em;
        font-weight: bold; }
.product { border: 1px solid #ccc; border-radius: 6px; padding: 1em;
           margin: 1em 0; }
.price { color: #8a4b08; font-weight: bold; }
footer { margin-top: 3em; border-top: 1px solid #ccc; padding-top: 1em;
         color: #999; font-size: .85em; text-align: center; }
"""


def _page(title: str, body: str) -> HTMLResponse:
    html = f"""\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title} - Compost &amp; Co.</title>
  <style>{_CSS}</style>
</head>
<body>
  <nav>
    <a href="/">Home</a>
    <a href="/products">Products</a>
    <a href="/blog">Blog</a>
    <a href="/cart">Cart</a>
  </nav>
  {body}
  <footer>Compost &amp; Co. &mdash; a specrules demo</footer>
</body>
</html>"""
    return HTMLResponse(content=html)


def _product_card(p: Product) -> str:
    return f"""\
<div class="product" data-slug="{p.slug}">
  <h2><a href="/products/{p.slug}">{p.name}</a></h2>
  <p>{p.summary}</p>
  <p class="price">{p.price}</p>
</div>"""


def create_app(
    store: SettingsStore | None = None,
    cache: RuleCache | None = None,
) -> FastAPI:
    """Build the demo application.

    Args:
        store: Settings store. Defaults to an in-memory store seeded with
            ``DEFAULT_SETTINGS``.
        cache: Rule cache shared by the middleware and the settings page.

    Returns:
        The FastAPI app.
    """
    store = store if store is not None else InMemorySettingsStore(
        DEFAULT_SETTINGS
    )
    cache = cache if cache is not None else RuleCache()

    app = FastAPI(title="Compost & Co.", version="1.0.0")
    app.add_middleware(SpeculationRulesMiddleware, store=store, cache=cache)
    app.include_router(
        create_admin_router(
            store, cache=cache, available_categories=CATEGORIES
        )
    )

    # ── Routes: pages ──────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def homepage(request: Request):
        request.state.speculation_category = "page"
        cards = "\n".join(_product_card(p) for p in PRODUCTS[:2])
        body = f"""\
<h1>Compost &amp; Co.</h1>
<p>Tools and seeds for people who garden on purpose.</p>
<h2>Featured</h2>
{cards}"""
        return _page("Home", body)

    @app.get("/cart", response_class=HTMLResponse)
    async def cart(request: Request):
        request.state.speculation_category = "page"
        body = """\
<h1>Your Cart</h1>
<p>Your cart is empty.</p>
<p><a href="/checkout">Checkout</a></p>"""
        return _page("Cart", body)

    @app.get("/checkout", response_class=HTMLResponse)
    async def checkout(request: Request):
        request.state.speculation_category = "checkout"
        return _page("Checkout", "<h1>Checkout</h1><p>Nothing to pay.</p>")

    # ── Routes: products ───────────────────────────────────────────

    @app.get("/products", response_class=HTMLResponse)
    async def product_list():
        cards = "\n".join(_product_card(p) for p in PRODUCTS)
        return _page("Products", f"<h1>Products</h1>\n{cards}")

    @app.get("/products/{slug}", response_class=HTMLResponse)
    async def product_detail(request: Request, slug: str):
        product = PRODUCTS_BY_SLUG.get(slug)
        if product is None:
            raise HTTPException(404, f"No product named {slug}")
        request.state.speculation_category = "product"
        body = f"""\
<h1>{product.name}</h1>
<p>{product.summary}</p>
<p class="price">{product.price}</p>
<form method="post" action="/cart"><button>Add to cart</button></form>"""
        return _page(product.name, body)

    # ── Routes: blog ───────────────────────────────────────────────

    @app.get("/blog", response_class=HTMLResponse)
    async def blog_index():
        items = "\n".join(
            f'<li><a href="/blog/{p.slug}">{p.title}</a></li>' for p in POSTS
        )
        return _page("Blog", f"<h1>Blog</h1>\n<ul>\n{items}\n</ul>")

    @app.get("/blog/{slug}", response_class=HTMLResponse)
    async def blog_post(request: Request, slug: str):
        post = POSTS_BY_SLUG.get(slug)
        if post is None:
            raise HTTPException(404, f"No post named {slug}")
        request.state.speculation_category = "post"
        return _page(post.title, f"<h1>{post.title}</h1>\n<p>{post.body}</p>")

    # ── Routes: JSON API ───────────────────────────────────────────

    @app.get("/api/products")
    async def api_products():
        return [
            {"slug": p.slug, "name": p.name, "price_cents": p.price_cents}
            for p in PRODUCTS
        ]

    return app


app = create_app()
