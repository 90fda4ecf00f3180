"""Tests for menu: catalog loading, CategorySelector and MenuView."""

import json

import pytest
from pydantic import ValidationError

from menu import (
    Category,
    CatalogError,
    CategorySelector,
    InvalidCategory,
    MenuCategoryNotFound,
    MenuEntry,
    MenuView,
    default_catalog,
    load_catalog,
)


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def view(catalog):
    return MenuView(catalog, CategorySelector())


def _write(tmp_path, data):
    path = tmp_path / "menu.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _minimal():
    return {c.value: [{"name": f"{c.value} dish", "description": "", "price": "$1"}] for c in Category}


# ── catalog ────────────────────────────────────────────────────────────────

def test_every_category_has_entries(catalog):
    """Lookup is total over the enumeration and never empty."""
    assert catalog.categories() == list(Category)
    for c in Category:
        entries = catalog.entries_for(c)
        assert len(entries) > 0
        assert all(isinstance(e, MenuEntry) for e in entries)


def test_entries_are_stable_across_reads(view):
    """Repeated reads return the same ordered sequence."""
    for c in Category:
        first = view.entries_for(c)
        assert view.entries_for(c) == first
        assert view.entries_for(c.value) == first


def test_desserts_dataset(view):
    desserts = view.entries_for("desserts")
    assert len(desserts) == 4
    assert desserts[0].name == "Dark Chocolate Soufflé"
    assert desserts[0].price == "$14"


def test_entries_cannot_be_mutated(view):
    entries = view.entries_for(Category.MAINS)
    assert isinstance(entries, tuple)
    with pytest.raises(ValidationError):
        entries[0].name = "changed"


def test_unknown_category_lookup_raises_not_found(view):
    with pytest.raises(MenuCategoryNotFound):
        view.entries_for("brunch")
    with pytest.raises(KeyError):
        view.entries_for("brunch")


def test_catalog_mapping_protocol(catalog):
    assert len(catalog) == 4
    assert "mains" in catalog
    assert "brunch" not in catalog
    assert list(catalog) == list(Category)
    assert catalog.as_dict()["drinks"][-1] == {
        "name": "House Wine Selection",
        "description": "Curated by our sommelier",
        "price": "$12-18",
    }


def test_load_catalog_from_file(tmp_path):
    catalog = load_catalog(_write(tmp_path, _minimal()))
    assert catalog.entries_for("drinks")[0].name == "drinks dish"


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(tmp_path / "nope.json")


def test_load_catalog_bad_json(tmp_path):
    path = tmp_path / "menu.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError, match="not valid JSON"):
        load_catalog(path)


@pytest.mark.parametrize("mutate, message", [
    (lambda d: d.pop("drinks"), "missing categories: drinks"),
    (lambda d: d.update(brunch=[{"name": "x", "price": "$1"}]), "Unknown menu category"),
    (lambda d: d.update(mains=[]), "non-empty list"),
    (lambda d: d.update(mains=[{"name": "x"}]), "Malformed entry"),
    (lambda d: d.update(mains=[{"name": "x", "price": "$1", "calories": 10}]), "Malformed entry"),
])
def test_load_catalog_rejects_bad_shape(tmp_path, mutate, message):
    data = _minimal()
    mutate(data)
    with pytest.raises(CatalogError, match=message):
        load_catalog(_write(tmp_path, data))


def test_catalog_must_be_object(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(_write(tmp_path, [1, 2, 3]))


# ── selector ───────────────────────────────────────────────────────────────

def test_selector_defaults_to_starters():
    assert CategorySelector().current() is Category.STARTERS


def test_select_mains_updates_view(view):
    view.selector.select("mains")
    assert view.selector.current() is Category.MAINS
    assert view.displayed() == view.entries_for("mains")


def test_select_notifies_subscribers_in_order():
    selector = CategorySelector()
    seen = []
    selector.subscribe(lambda c: seen.append(("a", c)))
    selector.subscribe(lambda c: seen.append(("b", c)))
    selector.select(Category.DRINKS)
    assert seen == [("a", Category.DRINKS), ("b", Category.DRINKS)]


def test_selecting_active_category_is_a_noop():
    selector = CategorySelector()
    seen = []
    selector.subscribe(seen.append)
    assert selector.select("starters") is Category.STARTERS
    assert seen == []


def test_unsubscribe_stops_notifications():
    selector = CategorySelector()
    seen = []
    unsubscribe = selector.subscribe(seen.append)
    selector.select("mains")
    unsubscribe()
    unsubscribe()
    selector.select("desserts")
    assert seen == [Category.MAINS]


@pytest.mark.parametrize("bad", ["brunch", "", None, 3, "Starters"])
def test_invalid_selection_is_rejected(bad):
    selector = CategorySelector()
    selector.select("desserts")
    seen = []
    selector.subscribe(seen.append)
    with pytest.raises(InvalidCategory):
        selector.select(bad)
    assert selector.current() is Category.DESSERTS
    assert seen == []


def test_selector_rejects_invalid_initial_value():
    with pytest.raises(ValueError):
        CategorySelector("lunch")
