# app.py
import time, logging, threading
from collections import deque
from typing import Deque, Dict, List
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.gzip import GZipMiddleware
from pydantic import BaseModel

from config import ALLOWED_ORIGINS, RATE_LIMIT_PER_MIN, MENU_CATALOG_PATH, IMAGES_DIR
from menu import (
    Category,
    CategorySelector,
    DEFAULT_CATEGORY,
    MenuCatalog,
    MenuCategoryNotFound,
    MenuEntry,
    MenuView,
    default_catalog,
)
from website import build_html, render_menu_region

# Logging
log = logging.getLogger("uvicorn.error")


# ────────────────────────────────────────────────────────────────────────────
# App (lifespan loads the catalog once; a bad catalog fails startup)
# ────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.catalog = default_catalog()
    log.info("menu ready: %d categories from %s", len(app.state.catalog), MENU_CATALOG_PATH)
    yield

app = FastAPI(title="Luna Bistro", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)
# Compression
app.add_middleware(GZipMiddleware, minimum_size=500)

# Site imagery is served as-is; nothing here inspects it.
app.mount("/images", StaticFiles(directory=IMAGES_DIR, check_dir=False), name="images")


# ────────────────────────────────────────────────────────────────────────────
# Utilities: rate limiting, catalog access
# ────────────────────────────────────────────────────────────────────────────
_ip_hits: Dict[str, Deque[float]] = {}
_ip_lock = threading.Lock()
MAX_IP_BUCKETS = 10_000

def _evict_idle_buckets(window_start: float) -> None:
    for ip in [ip for ip, b in _ip_hits.items() if not b or b[-1] < window_start]:
        del _ip_hits[ip]

def rate_limit(request: Request):
    ip = request.client.host if request.client else "unknown"
    now = time.time()
    window_start = now - 60.0

    with _ip_lock:
        if len(_ip_hits) >= MAX_IP_BUCKETS and ip not in _ip_hits:
            _evict_idle_buckets(window_start)
            if len(_ip_hits) >= MAX_IP_BUCKETS:
                # basic protection against memory bloat
                raise HTTPException(503, "Server busy")

        bucket = _ip_hits.setdefault(ip, deque())
        while bucket and bucket[0] < window_start:
            bucket.popleft()
        if len(bucket) >= RATE_LIMIT_PER_MIN:
            raise HTTPException(429, "Rate limit exceeded.")
        bucket.append(now)

def get_catalog(request: Request) -> MenuCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = request.app.state.catalog = default_catalog()
    return catalog


# ────────────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────────────
class CategoryOut(BaseModel):
    category: Category
    entries: List[MenuEntry]

class MenuOut(BaseModel):
    categories: List[Category]
    menu: Dict[str, List[MenuEntry]]


# ────────────────────────────────────────────────────────────────────────────
# Endpoints
# ────────────────────────────────────────────────────────────────────────────
@app.get("/", response_class=HTMLResponse, summary="Render the restaurant page")
async def home(
    category: Category = Query(DEFAULT_CATEGORY, description="Menu tab shown on first load"),
    catalog: MenuCatalog = Depends(get_catalog),
    _: None = Depends(rate_limit),
):
    try:
        html, _meta = build_html(category, catalog=catalog)
    except Exception as e:
        log.error("Error building HTML: %s", e)
        raise HTTPException(500, "Failed to render page")
    return HTMLResponse(html)

@app.get("/healthz", summary="Liveness probe")
async def healthz():
    return {"ok": True, "ts": time.time()}

@app.get("/menu", response_model=MenuOut, summary="Full menu, grouped by category in tab order")
async def menu_all(
    catalog: MenuCatalog = Depends(get_catalog),
    _: None = Depends(rate_limit),
):
    return {
        "categories": catalog.categories(),
        "menu": {c.value: list(entries) for c, entries in catalog.items()},
    }

@app.get("/menu/{category}", response_model=CategoryOut, summary="Entries for one menu category")
async def menu_category(
    category: str,
    catalog: MenuCatalog = Depends(get_catalog),
    _: None = Depends(rate_limit),
):
    try:
        entries = catalog.entries_for(category)
    except MenuCategoryNotFound:
        raise HTTPException(404, f"Unknown menu category: {category}")
    return {"category": Category.parse(category), "entries": list(entries)}

@app.get("/menu/{category}/fragment", response_class=HTMLResponse, summary="Menu region HTML for one category")
async def menu_fragment(
    category: str,
    catalog: MenuCatalog = Depends(get_catalog),
    _: None = Depends(rate_limit),
):
    """Tabs + entry list only; lets a client swap the menu region without reloading the page."""
    try:
        catalog.entries_for(category)
    except MenuCategoryNotFound:
        raise HTTPException(404, f"Unknown menu category: {category}")
    view = MenuView(catalog, CategorySelector(category))
    return HTMLResponse(render_menu_region(view))
