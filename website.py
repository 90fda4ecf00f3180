import json
import time
import logging
from typing import Dict, Any, Optional, Sequence, Tuple

import config
from menu import (
    Category,
    CategoryLike,
    CategorySelector,
    MenuCatalog,
    MenuEntry,
    MenuView,
    default_catalog,
)

log = logging.getLogger("uvicorn.error")

CONTAINER = "max-w-6xl mx-auto px-4 sm:px-6 lg:px-8"
SECTION = "py-16 sm:py-24 md:py-32"

TAB_ACTIVE = "border-accent text-accent"
TAB_IDLE = "border-transparent text-gray-400 hover:text-foreground"

HERO_IMAGE = "/images/hero-ambiance.jpg"
CHEF_IMAGE = "/images/chef-craft.jpg"
GALLERY_IMAGES = [
    {"src": "/images/hero-food.jpg", "alt": "Signature dish plating"},
    {"src": "/images/menu-showcase.jpg", "alt": "Menu showcase"},
]

NAV_LINKS = [("#menu", "Menu"), ("#about", "About"), ("#gallery", "Gallery"), ("#reserve", "Reserve")]

VALUE_PROPS = [
    {
        "title": "Fresh Ingredients",
        "body": "Sourced daily from local farmers and sustainable suppliers. Every ingredient is selected for quality and flavor.",
    },
    {
        "title": "Chef-Crafted",
        "body": "Our executive chef brings 20+ years of culinary expertise, creating innovative dishes that honor tradition.",
    },
    {
        "title": "Intimate Ambiance",
        "body": "Thoughtfully designed spaces with warm lighting and curated music create the perfect backdrop for every occasion.",
    },
]

ABOUT_PARAGRAPHS = [
    "Founded in 2018, {name} emerged from a vision to create a sanctuary for food lovers seeking authentic culinary "
    "excellence. Our name reflects the restaurant's commitment to creating magical moments, under the glow of warm "
    "lighting and surrounded by like-minded diners.",
    "Chef Marcus Chen leads our kitchen with a philosophy rooted in respect for ingredients and technique. Each dish "
    "tells a story of sourcing, preparation, and passion. We believe that exceptional food, paired with genuine "
    "hospitality, creates memories that last a lifetime.",
    "Whether you're celebrating a milestone or simply seeking an exceptional meal, {name} welcomes you to our table.",
]

GUEST_OPTIONS = ["1", "2", "3", "4", "5+"]

CONTACT_BLOCKS = [
    ("Location", ["428 Urban Avenue", "Downtown District", "New York, NY 10001"]),
    ("Contact", ["Phone: (212) 555-0123", "Email: hello@lunabistro.com", "Reservations: reserve@lunabistro.com"]),
    ("Hours", ["Tue–Thu: 5pm–11pm", "Fri–Sat: 5pm–12am", "Sun: 5pm–10pm", "Closed Mondays"]),
]

SOCIAL_LINKS = [("Instagram", "#"), ("Facebook", "#")]


def safe(s: Optional[str]) -> str:
    return (s or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _script_json(data: Any) -> str:
    # keep "</script>" inside string values from closing the tag
    return json.dumps(data, ensure_ascii=False).replace("</", "<\\/")


# ────────────────────────────────────────────────────────────────────────────
# Menu region (the only part of the page that depends on state)
# ────────────────────────────────────────────────────────────────────────────
def render_tabs(active: CategoryLike) -> str:
    active = Category.parse(active)
    tabs = []
    for c in Category:
        is_active = c is active
        tabs.append(
            f'<a role="tab" href="?category={c.value}#menu" data-category="{c.value}" '
            f'aria-selected="{"true" if is_active else "false"}" '
            f'class="menu-tab text-base sm:text-lg font-serif capitalize pb-2 border-b-2 transition-colors whitespace-nowrap '
            f'{TAB_ACTIVE if is_active else TAB_IDLE}">{safe(c.label)}</a>'
        )
    return (
        '<div id="menu-tabs" role="tablist" aria-label="Menu categories" '
        'class="flex flex-wrap gap-2 sm:gap-4 mb-8 sm:mb-12 border-b border-border pb-4 sm:pb-6 overflow-x-auto">'
        + "".join(tabs)
        + "</div>"
    )


def render_menu_items(entries: Sequence[MenuEntry]) -> str:
    # name, price, description: in that order, catalog order preserved
    items = "".join([
        f"""
        <div class="menu-entry pb-6 sm:pb-8 border-b border-border/50 last:border-b-0">
          <div class="flex justify-between items-start mb-2 gap-4">
            <h4 class="text-lg sm:text-xl font-serif font-bold">{safe(e.name)}</h4>
            <span class="text-accent font-serif text-base sm:text-lg flex-shrink-0">{safe(e.price)}</span>
          </div>
          <p class="text-gray-400 text-xs sm:text-sm">{safe(e.description)}</p>
        </div>"""
        for e in entries
    ])
    return f'<div id="menu-list" class="grid sm:grid-cols-2 gap-6 sm:gap-8">{items}\n      </div>'


def render_menu_region(view: MenuView) -> str:
    active = view.selector.current()
    return (
        f'<div id="menu-region" data-active="{active.value}">'
        + render_tabs(active)
        + render_menu_items(view.displayed())
        + "</div>"
    )


# ────────────────────────────────────────────────────────────────────────────
# Static sections
# ────────────────────────────────────────────────────────────────────────────
def _head(site_name: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1.0"/>
<title>{safe(site_name)}</title>
<link href="https://fonts.googleapis.com/css2?family=Playfair+Display:wght@600;700&display=swap" rel="stylesheet"/>
<script src="https://cdn.tailwindcss.com"></script>
<script>
tailwind.config = {{
  theme: {{
    extend: {{
      colors: {{
        background: "#1c1a17",
        foreground: "#efe6d8",
        card: "#24211d",
        border: "#3a352e",
        accent: "#c8a45c"
      }},
      fontFamily: {{
        serif: ['"Playfair Display"','Georgia','serif']
      }}
    }}
  }}
}}
</script>
<style>
  html{{scroll-behavior:smooth;}}
  body{{margin:0;min-height:100%;}}
  .accent-rule{{width:4rem;height:.25rem;}}
</style>
<meta http-equiv="Content-Security-Policy"
  content="default-src 'self'; img-src 'self' data: https:; style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; font-src https://fonts.gstatic.com; script-src 'self' 'unsafe-inline' https://cdn.tailwindcss.com; connect-src 'self';">
<meta name="referrer" content="no-referrer">
</head>
<body class="min-h-screen bg-background text-foreground">
"""


def _nav(brand: str) -> str:
    links = "".join([f'<a href="{href}" class="hover:text-accent transition-colors">{safe(label)}</a>' for href, label in NAV_LINKS])
    return f"""
  <nav class="fixed top-0 left-0 right-0 z-50 bg-background/95 backdrop-blur-sm border-b border-border">
    <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8 py-4 flex justify-between items-center">
      <div class="text-2xl font-bold font-serif tracking-tight text-accent">{safe(brand)}</div>
      <div class="hidden md:flex gap-8 text-sm">{links}</div>
      <a href="#reserve" class="rounded-md px-4 py-2 bg-accent text-background hover:bg-accent/90">Reserve Now</a>
    </div>
  </nav>
"""


def _hero(site_name: str) -> str:
    return f"""
  <section id="top" class="relative h-screen flex items-center justify-center overflow-hidden pt-16">
    <div class="absolute inset-0 z-0">
      <img src="{HERO_IMAGE}" alt="{safe(site_name)} dining experience" class="w-full h-full object-cover"/>
      <div class="absolute inset-0 bg-black/40"></div>
    </div>
    <div class="relative z-10 text-center max-w-3xl mx-auto px-4 sm:px-6">
      <h1 class="text-4xl sm:text-5xl md:text-6xl lg:text-7xl font-serif font-bold mb-4 sm:mb-6 text-white leading-tight">Where Flavor Meets Atmosphere</h1>
      <p class="text-base sm:text-lg md:text-xl text-gray-100 mb-6 sm:mb-8 max-w-2xl mx-auto leading-relaxed">
        Experience chef-crafted cuisine in an intimate setting designed for unforgettable moments.
      </p>
      <div class="flex flex-col sm:flex-row gap-3 sm:gap-4 justify-center">
        <a href="#menu" class="rounded-md px-6 py-3 bg-accent text-background hover:bg-accent/90">View Menu &rsaquo;</a>
        <a href="#reserve" class="rounded-md px-6 py-3 border border-white text-white hover:bg-white/10">Reserve a Table</a>
      </div>
    </div>
  </section>
"""


def _value_props() -> str:
    cards = "".join([
        f"""
        <div class="space-y-4">
          <div class="text-4xl font-serif font-bold text-accent">&#10003;</div>
          <h3 class="text-xl sm:text-2xl font-serif font-bold">{safe(v['title'])}</h3>
          <p class="text-gray-400 leading-relaxed text-sm sm:text-base">{safe(v['body'])}</p>
        </div>"""
        for v in VALUE_PROPS
    ])
    return f"""
  <section class="{SECTION} bg-background border-b border-border">
    <div class="{CONTAINER}">
      <div class="grid sm:grid-cols-2 md:grid-cols-3 gap-8 md:gap-12">{cards}
      </div>
    </div>
  </section>
"""


def _menu_open() -> str:
    return f"""
  <section id="menu" class="{SECTION} bg-card border-b border-border">
    <div class="{CONTAINER}">
      <div class="mb-8 sm:mb-12">
        <h2 class="text-3xl sm:text-4xl md:text-5xl font-serif font-bold mb-3 sm:mb-4">Our Menu</h2>
        <div class="accent-rule bg-accent"></div>
      </div>
      """


def _menu_close() -> str:
    return """
      <div class="mt-8 sm:mt-12 text-center">
        <p class="text-gray-400 mb-6 text-sm sm:text-base">Seasonal menu changes monthly. Ask your server about today's specials.</p>
      </div>
    </div>
  </section>
"""


def _about(site_name: str) -> str:
    paras = "".join([
        f'\n          <p class="text-gray-400 mb-4 sm:mb-6 leading-relaxed text-sm sm:text-base">{safe(p.format(name=site_name))}</p>'
        for p in ABOUT_PARAGRAPHS
    ])
    return f"""
  <section id="about" class="{SECTION} bg-background border-b border-border">
    <div class="{CONTAINER}">
      <div class="grid md:grid-cols-2 gap-8 md:gap-12 items-center">
        <div>
          <h2 class="text-3xl sm:text-4xl md:text-5xl font-serif font-bold mb-4 sm:mb-6">About {safe(site_name)}</h2>
          <div class="accent-rule bg-accent mb-6 sm:mb-8"></div>{paras}
        </div>
        <div class="relative h-64 sm:h-80 md:h-96 rounded-lg overflow-hidden">
          <img src="{CHEF_IMAGE}" alt="Chef Marcus Chen at work" class="w-full h-full object-cover hover:scale-105" loading="lazy"/>
        </div>
      </div>
    </div>
  </section>
"""


def _gallery() -> str:
    tiles = "".join([
        f"""
        <div class="relative h-48 sm:h-64 md:h-96 rounded-lg overflow-hidden">
          <img src="{g['src']}" alt="{safe(g['alt'])}" class="w-full h-full object-cover hover:scale-105 transition-transform duration-500" loading="lazy"/>
        </div>"""
        for g in GALLERY_IMAGES
    ])
    return f"""
  <section id="gallery" class="{SECTION} bg-card border-b border-border">
    <div class="{CONTAINER}">
      <div class="mb-8 sm:mb-12">
        <h2 class="text-3xl sm:text-4xl md:text-5xl font-serif font-bold mb-3 sm:mb-4">Gallery</h2>
        <div class="accent-rule bg-accent"></div>
      </div>
      <div class="grid sm:grid-cols-2 gap-4 sm:gap-8">{tiles}
      </div>
    </div>
  </section>
"""


def _reservation_form() -> str:
    field = "w-full bg-background border border-border rounded-lg px-3 sm:px-4 py-2 text-foreground placeholder-gray-500 focus:outline-none focus:ring-2 focus:ring-accent text-sm"
    label = "block text-xs sm:text-sm font-medium mb-2"
    guests = "".join([f"<option>{g} Guest{'' if g == '1' else 's'}</option>" for g in GUEST_OPTIONS])
    # No action/method: the form is display-only until a booking backend exists.
    return f"""
  <section id="reserve" class="{SECTION} bg-background border-b border-border">
    <div class="max-w-2xl mx-auto px-4 sm:px-6 lg:px-8">
      <div class="mb-8 sm:mb-12 text-center">
        <h2 class="text-3xl sm:text-4xl md:text-5xl font-serif font-bold mb-3 sm:mb-4">Reserve Your Table</h2>
        <div class="accent-rule bg-accent mx-auto"></div>
      </div>
      <div class="rounded-xl bg-card border border-border p-6 sm:p-8 md:p-12">
        <form id="reservation-form" class="space-y-4 sm:space-y-6">
          <div class="grid sm:grid-cols-2 gap-4 sm:gap-6">
            <div><label class="{label}" for="res-name">Name</label><input id="res-name" name="name" type="text" placeholder="Your name" class="{field}"/></div>
            <div><label class="{label}" for="res-email">Email</label><input id="res-email" name="email" type="email" placeholder="your@email.com" class="{field}"/></div>
          </div>
          <div class="grid sm:grid-cols-2 gap-4 sm:gap-6">
            <div><label class="{label}" for="res-date">Date</label><input id="res-date" name="date" type="date" class="{field}"/></div>
            <div><label class="{label}" for="res-time">Time</label><input id="res-time" name="time" type="time" class="{field}"/></div>
          </div>
          <div class="grid sm:grid-cols-2 gap-4 sm:gap-6">
            <div><label class="{label}" for="res-guests">Guests</label><select id="res-guests" name="guests" class="{field}">{guests}</select></div>
            <div><label class="{label}" for="res-phone">Phone</label><input id="res-phone" name="phone" type="tel" placeholder="+1 (555) 123-4567" class="{field}"/></div>
          </div>
          <div>
            <label class="{label}" for="res-requests">Special Requests</label>
            <textarea id="res-requests" name="requests" rows="4" placeholder="Allergies, dietary preferences, or special occasions..." class="{field} resize-none"></textarea>
          </div>
          <button type="button" class="w-full rounded-md bg-accent text-background hover:bg-accent/90 h-10 sm:h-12 text-sm sm:text-base font-medium">Reserve Table</button>
        </form>
      </div>
    </div>
  </section>
"""


def _footer(site_name: str) -> str:
    blocks = "".join([
        f"""
        <div>
          <h4 class="text-base sm:text-lg font-serif font-bold mb-3 sm:mb-4 text-accent">{safe(title)}</h4>
          <p class="text-gray-400 text-sm sm:text-base">{"<br/>".join(safe(line) for line in lines)}</p>
        </div>"""
        for title, lines in CONTACT_BLOCKS
    ])
    socials = "".join([f'<a href="{href}" class="text-gray-400 hover:text-accent transition-colors">{safe(label)}</a>' for label, href in SOCIAL_LINKS])
    return f"""
  <footer class="bg-card border-t border-border py-12 sm:py-16">
    <div class="{CONTAINER}">
      <div class="grid sm:grid-cols-2 md:grid-cols-3 gap-8 md:gap-12 mb-8 sm:mb-12">{blocks}
      </div>
      <div class="border-t border-border pt-6 sm:pt-8 flex flex-col sm:flex-row justify-between items-center gap-4 sm:gap-6">
        <div class="text-xs sm:text-sm text-gray-500">&copy; {time.strftime("%Y")} {safe(site_name)}. All rights reserved.</div>
        <div class="flex gap-6">{socials}</div>
      </div>
    </div>
  </footer>
"""


def _tail(catalog: MenuCatalog) -> str:
    return f"""
<script type="application/json" id="menu-catalog">{_script_json(catalog.as_dict())}</script>
<script>
  (function() {{
    var region = document.getElementById('menu-region');
    var data = JSON.parse(document.getElementById('menu-catalog').textContent);
    if (!region || !data) return;

    var ACTIVE = {json.dumps(TAB_ACTIVE.split())};
    var IDLE = {json.dumps(TAB_IDLE.split())};

    function el(tag, cls, text) {{
      var n = document.createElement(tag);
      n.className = cls;
      if (text !== undefined) n.textContent = text;
      return n;
    }}

    function renderList(category) {{
      var list = document.getElementById('menu-list');
      list.innerHTML = '';
      (data[category] || []).forEach(function(item) {{
        var card = el('div', 'menu-entry pb-6 sm:pb-8 border-b border-border/50 last:border-b-0');
        var row = el('div', 'flex justify-between items-start mb-2 gap-4');
        row.appendChild(el('h4', 'text-lg sm:text-xl font-serif font-bold', item.name));
        row.appendChild(el('span', 'text-accent font-serif text-base sm:text-lg flex-shrink-0', item.price));
        card.appendChild(row);
        card.appendChild(el('p', 'text-gray-400 text-xs sm:text-sm', item.description));
        list.appendChild(card);
      }});
    }}

    function select(category) {{
      if (!Object.prototype.hasOwnProperty.call(data, category)) return;
      if (region.getAttribute('data-active') === category) return;
      region.setAttribute('data-active', category);
      region.querySelectorAll('.menu-tab').forEach(function(t) {{
        var on = t.getAttribute('data-category') === category;
        t.setAttribute('aria-selected', on ? 'true' : 'false');
        (on ? IDLE : ACTIVE).forEach(function(c) {{ t.classList.remove(c); }});
        (on ? ACTIVE : IDLE).forEach(function(c) {{ t.classList.add(c); }});
      }});
      renderList(category);
    }}

    region.querySelectorAll('.menu-tab').forEach(function(t) {{
      t.addEventListener('click', function(ev) {{
        ev.preventDefault();
        select(t.getAttribute('data-category'));
      }});
    }});
  }})();
</script>

</body>
</html>
"""


# ────────────────────────────────────────────────────────────────────────────
# Page
# ────────────────────────────────────────────────────────────────────────────
class Page:
    """Full marketing page. Static sections render once; the menu region
    re-renders whenever the selector reports a new category."""

    def __init__(self, catalog: MenuCatalog, selector: CategorySelector, *,
                 site_name: str = config.SITE_NAME, brand: str = config.BRAND_NAME):
        self.view = MenuView(catalog, selector)
        self.site_name = site_name
        self.brand = brand
        self.static_render_count = 0
        self.menu_render_count = 0

        self._before_menu, self._after_menu = self._render_static()
        self._menu_html = self._render_menu()
        self._unsubscribe = selector.subscribe(self._on_category_change)

    def _render_static(self) -> Tuple[str, str]:
        self.static_render_count += 1
        before = "".join([
            _head(self.site_name),
            _nav(self.brand),
            _hero(self.site_name),
            _value_props(),
            _menu_open(),
        ])
        after = "".join([
            _menu_close(),
            _about(self.site_name),
            _gallery(),
            _reservation_form(),
            _footer(self.site_name),
            _tail(self.view.catalog),
        ])
        return before, after

    def _render_menu(self) -> str:
        self.menu_render_count += 1
        return render_menu_region(self.view)

    def _on_category_change(self, category: Category) -> None:
        log.debug("menu category -> %s; re-rendering menu region", category.value)
        self._menu_html = self._render_menu()

    @property
    def menu_region(self) -> str:
        return self._menu_html

    def render(self) -> str:
        return self._before_menu + self._menu_html + self._after_menu

    def close(self) -> None:
        self._unsubscribe()


def build_html(category: Optional[CategoryLike] = None, *,
               catalog: Optional[MenuCatalog] = None) -> Tuple[str, Dict[str, Any]]:
    if catalog is None:
        catalog = default_catalog()
    selector = CategorySelector()
    if category is not None:
        selector.select(category)
    page = Page(catalog, selector)
    html = page.render()
    page.close()

    active = selector.current()
    log.info("BUILD PAGE: name=%s category=%s entries=%d", page.site_name, active.value, len(page.view.displayed()))
    meta = {
        "name": page.site_name,
        "category": active.value,
        "categories": [c.value for c in catalog.categories()],
        "entry_count": len(page.view.displayed()),
    }
    return html, meta
