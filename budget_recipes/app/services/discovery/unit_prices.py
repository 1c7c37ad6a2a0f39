"""Per-ingredient reference prices."""

import re
import unicodedata
from abc import ABC, abstractmethod
from typing import Dict, Optional

from budget_recipes.app.services.discovery.models import UnitPrice

# Average Québec grocery prices (CAD) per category; "default" covers unlisted items.
FALLBACK_PRICES: Dict[str, Dict[str, float]] = {
    "viande": {
        "poulet": 10.99, "poulet entier": 10.99, "poulet haché": 12.99, "cuisses de poulet": 8.99,
        "poitrines de poulet": 14.99, "boeuf": 12.99, "steak haché": 9.49, "bœuf haché": 9.49,
        "porc": 9.99, "côtelettes de porc": 11.99, "jambon": 6.99, "agneau": 15.99, "veau": 16.99,
        "saucisse": 6.99, "bacon": 7.99,
        "default": 11.50,
    },
    "poisson": {
        "saumon": 14.99, "thon": 8.99, "filet de saumon": 14.99, "morue": 12.99, "crevette": 14.99,
        "crevettes crues": 15.99, "crevettes cuites": 16.99, "crevettes décortiquées": 18.99,
        "fruits de mer": 13.99, "homard": 18.99, "crabe": 15.99, "filet de poisson": 12.99,
        "poisson blanc": 11.99, "tilapia": 10.99, "pangasius": 9.99,
        "default": 13.00,
    },
    "pates": {
        "pâtes": 2.29, "spaghetti": 2.29, "penne": 2.49, "riz": 3.99, "riz blanc": 3.99, "riz brun": 4.49,
        "quinoa": 7.99, "couscous": 4.99, "orzo": 3.99,
        "default": 3.50,
    },
    "legumes": {
        "tomates cerises": 4.99, "tomate": 2.99, "carotte": 0.89, "poivron rouge": 1.99, "poivron vert": 1.49,
        "poivron jaune": 1.99, "poivron": 1.49, "oignons verts": 1.99, "oignons rouges": 1.49, "oignon": 1.29,
        "pommes de terre": 1.99, "patates douces": 2.49, "patate": 1.99, "laitue romaine": 2.49, "laitue": 1.99,
        "salade": 1.99, "légumes verts": 2.49, "brocoli": 2.99, "choufleur": 2.99, "courgette": 1.99,
        "aubergine": 2.49, "champignons portobello": 4.99, "champignons shiitake": 5.99, "champignon": 3.99,
        "légumes congelés": 3.49, "haricots verts": 2.99, "haricots jaunes": 2.99, "asperges": 4.99,
        "épinards": 2.99, "chou rouge": 2.49, "chou frisé": 3.99, "chou": 1.99, "céleri": 1.99,
        "concombre": 1.49, "radis": 1.99, "navet": 1.99, "panais": 2.49,
        "default": 2.50,
    },
    "fruits": {
        "pomme": 1.99, "banane": 1.49, "orange": 2.99, "fraise": 4.99, "bleuets": 5.99, "framboises": 5.99,
        "fruits congelés": 4.99,
        "default": 3.50,
    },
    "laitier": {
        "lait": 5.29, "fromage râpé": 5.99, "fromage cottage": 4.99, "fromage": 6.99, "beurre": 5.99,
        "yogourt": 4.99, "yaourt": 4.99, "crème sure": 3.49, "crème": 3.99,
        "default": 5.00,
    },
    "epices": {
        "sel": 1.99, "poivre": 2.99, "ail": 1.99, "herbes fraîches": 2.99, "herbes séchées": 3.99,
        "épices": 3.99,
        "default": 2.50,
    },
    "conserves": {
        "tomates en conserve": 1.99, "haricots": 1.49, "maïs en conserve": 1.29, "thon en conserve": 2.99,
        "default": 1.75,
    },
    "autres": {
        "huile d'olive": 8.99, "huile de canola": 4.99, "huile végétale": 4.99, "huile": 5.99,
        "vinaigre balsamique": 6.99, "vinaigre de cidre": 4.99, "vinaigre": 3.99,
        "farine": 4.99, "sucre brun": 4.49, "sucre": 3.99, "cassonade": 4.49, "oeufs": 4.79,
        "pain de blé entier": 3.49, "pain multigrain": 3.99, "pain": 2.99, "naan": 3.99, "tortillas": 3.49,
        "pita": 2.99, "mozzarella": 6.99, "sauce tomate": 1.99, "pâte de tomate": 1.49,
        "bouillon": 1.99, "levure": 4.99, "bicarbonate de soude": 1.99, "poudre à pâte": 2.99,
        "default": 4.50,
    },
}

# Checked in order; the first category with a keyword in the name wins.
CATEGORY_KEYWORDS: Dict[str, list] = {
    "viande": ["poulet", "boeuf", "porc", "agneau", "veau", "saucisse", "bacon", "jambon", "steak"],
    "poisson": ["saumon", "thon", "morue", "crevette", "homard", "crabe", "poisson", "fruits de mer"],
    "pates": ["pates", "spaghetti", "penne", "riz", "quinoa", "couscous", "orzo"],
    "legumes": [
        "tomate", "carotte", "poivron", "oignon", "patate", "pommes de terre", "pomme de terre", "laitue", "salade", "brocoli",
        "choufleur", "courgette", "aubergine", "champignon", "legume",
    ],
    "fruits": ["pomme", "banane", "orange", "fraise", "bleuet", "framboise", "fruit"],
    "laitier": ["lait", "fromage", "beurre", "yogourt", "yaourt", "creme", "laitier"],
    "epices": ["sel", "poivre", "ail", "herbe", "epice"],
    "conserves": ["conserve", "haricot", "mais", "canned"],
    "autres": ["huile", "vinaigre", "farine", "sucre", "oeuf", "pain"],
}


def normalize_name(name: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    text = (name or "").lower().replace("œ", "oe").replace("æ", "ae")
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Mn")
    text = re.sub(r"[^a-z0-9\s]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


class UnitPriceLookup(ABC):
    @abstractmethod
    async def lookup(self, ingredient_name: str, region_hint: Optional[str] = None) -> Optional[UnitPrice]:  # pragma: no cover - interface
        raise NotImplementedError


class FallbackPriceLookup(UnitPriceLookup):
    """Static price table; the region hint is accepted and ignored."""

    def __init__(self, prices: Optional[Dict[str, Dict[str, float]]] = None):
        prices = prices or FALLBACK_PRICES
        self.prices = {
            category: {(key if key == "default" else normalize_name(key)): price for key, price in table.items()}
            for category, table in prices.items()
        }

    @staticmethod
    def find_category(normalized: str) -> str:
        for category, keywords in CATEGORY_KEYWORDS.items():
            if any(keyword in normalized for keyword in keywords):
                return category
        return "autres"

    def lookup_sync(self, ingredient_name: str) -> Optional[UnitPrice]:
        normalized = normalize_name(ingredient_name)
        if not normalized:
            return None
        category = self.find_category(normalized)
        table = self.prices.get(category)
        if not table:
            return None
        if normalized in table:
            return UnitPrice(unit_price=table[normalized], source_label=f"fallback:{category}")
        for key, price in table.items():
            if key != "default" and key in normalized:
                return UnitPrice(unit_price=price, source_label=f"fallback:{category}")
        if "default" in table:
            return UnitPrice(unit_price=table["default"], source_label=f"fallback:{category}:default")
        return None

    async def lookup(self, ingredient_name: str, region_hint: Optional[str] = None) -> Optional[UnitPrice]:
        return self.lookup_sync(ingredient_name)
