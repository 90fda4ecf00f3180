# config.py
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

MENU_CATALOG_PATH = os.getenv("MENU_CATALOG_PATH", str(BASE_DIR / "assets" / "menu.json"))
IMAGES_DIR = os.getenv("IMAGES_DIR", str(BASE_DIR / "images"))

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
RATE_LIMIT_PER_MIN = int(os.getenv("RATE_LIMIT_PER_MIN", "120"))

SITE_NAME = os.getenv("SITE_NAME", "Luna Bistro")
BRAND_NAME = os.getenv("BRAND_NAME", "Luna")
