# menu.py
"""Menu catalog, active-category state and the menu projection.

The catalog is loaded once from JSON and never mutated. `CategorySelector`
owns the single piece of UI state (which tab is active) and notifies
subscribers when it changes; `MenuView` derives the entries to display.
"""
import json
import logging
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

import config

log = logging.getLogger("uvicorn.error")


# ────────────────────────────────────────────────────────────────────────────
# Errors
# ────────────────────────────────────────────────────────────────────────────
class MenuError(Exception):
    pass


class InvalidCategory(MenuError, ValueError):
    """Raised when a value outside the Category enumeration reaches the selector."""


class MenuCategoryNotFound(MenuError, KeyError):
    """Raised when the catalog has no entry list for the requested category."""


class CatalogError(MenuError):
    """Raised when the catalog file cannot be loaded."""


# ────────────────────────────────────────────────────────────────────────────
# Types
# ────────────────────────────────────────────────────────────────────────────
class Category(str, Enum):
    STARTERS = "starters"
    MAINS = "mains"
    DESSERTS = "desserts"
    DRINKS = "drinks"

    @classmethod
    def parse(cls, value: Union["Category", str]) -> "Category":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidCategory(f"Unknown menu category: {value!r}") from None

    @property
    def label(self) -> str:
        return self.value.capitalize()


CategoryLike = Union[Category, str]
DEFAULT_CATEGORY = Category.STARTERS


class MenuEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    description: str = ""
    price: str = Field(..., min_length=1, description="Display price, e.g. '$14' or '$12-18'")


# ────────────────────────────────────────────────────────────────────────────
# Catalog
# ────────────────────────────────────────────────────────────────────────────
class MenuCatalog(Mapping):
    """Read-only mapping of Category -> ordered tuple of MenuEntry."""

    def __init__(self, sections: Dict[Category, Tuple[MenuEntry, ...]]):
        ordered = {c: tuple(sections[c]) for c in Category if c in sections}
        self._sections = MappingProxyType(ordered)

    def __getitem__(self, category: CategoryLike) -> Tuple[MenuEntry, ...]:
        return self.entries_for(category)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def categories(self) -> List[Category]:
        return list(self._sections)

    def entries_for(self, category: CategoryLike) -> Tuple[MenuEntry, ...]:
        try:
            key = Category.parse(category)
        except InvalidCategory:
            raise MenuCategoryNotFound(category) from None
        try:
            return self._sections[key]
        except KeyError:
            raise MenuCategoryNotFound(key.value) from None

    def as_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {c.value: [e.model_dump() for e in entries] for c, entries in self._sections.items()}


def parse_catalog(raw: Any) -> MenuCatalog:
    if not isinstance(raw, dict):
        raise CatalogError("Menu catalog must be a JSON object keyed by category")

    sections: Dict[Category, Tuple[MenuEntry, ...]] = {}
    for key, items in raw.items():
        try:
            category = Category.parse(key)
        except InvalidCategory as e:
            raise CatalogError(str(e)) from e
        if not isinstance(items, list) or not items:
            raise CatalogError(f"Category {key!r} must be a non-empty list of entries")
        try:
            sections[category] = tuple(MenuEntry.model_validate(it) for it in items)
        except ValidationError as e:
            raise CatalogError(f"Malformed entry in {key!r}: {e}") from e

    missing = [c.value for c in Category if c not in sections]
    if missing:
        raise CatalogError(f"Menu catalog is missing categories: {', '.join(missing)}")
    return MenuCatalog(sections)


def load_catalog(path: Union[str, Path]) -> MenuCatalog:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"Menu catalog not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Menu catalog is not valid JSON ({path}): {e}") from e

    catalog = parse_catalog(raw)
    log.info("menu catalog loaded from %s: %s", path,
             ", ".join(f"{c.value}={len(catalog[c])}" for c in catalog))
    return catalog


_DEFAULT_CATALOG: Optional[MenuCatalog] = None


def default_catalog() -> MenuCatalog:
    """Process-wide catalog, loaded from MENU_CATALOG_PATH on first use."""
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = load_catalog(config.MENU_CATALOG_PATH)
    return _DEFAULT_CATALOG


# ────────────────────────────────────────────────────────────────────────────
# State + projection
# ────────────────────────────────────────────────────────────────────────────
Listener = Callable[[Category], None]


class CategorySelector:
    """Holds the active menu category and notifies listeners when it changes."""

    def __init__(self, initial: CategoryLike = DEFAULT_CATEGORY):
        self._active = Category.parse(initial)
        self._listeners: List[Listener] = []

    def current(self) -> Category:
        return self._active

    def select(self, category: CategoryLike) -> Category:
        try:
            new = Category.parse(category)
        except InvalidCategory:
            log.warning("rejected menu category selection %r; keeping %s", category, self._active.value)
            raise
        if new is self._active:
            return new
        self._active = new
        for listener in list(self._listeners):
            listener(new)
        return new

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe


class MenuView:
    def __init__(self, catalog: MenuCatalog, selector: CategorySelector):
        self.catalog = catalog
        self.selector = selector

    def entries_for(self, category: CategoryLike) -> Tuple[MenuEntry, ...]:
        return self.catalog.entries_for(category)

    def displayed(self) -> Tuple[MenuEntry, ...]:
        return self.entries_for(self.selector.current())
