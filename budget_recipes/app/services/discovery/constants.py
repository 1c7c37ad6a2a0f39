"""Fixed vocabularies used by parsing, filtering and cost estimation."""

from typing import Dict, List, Tuple

FRACTION_MAP = {
    "¼": "1/4",
    "½": "1/2",
    "¾": "3/4",
    "⅓": "1/3",
    "⅔": "2/3",
    "⅕": "1/5",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}
FRACTION_CHARS = "".join(FRACTION_MAP.keys())

# Bilingual (fr/en) unit vocabulary. Multi-word entries are matched as phrases.
UNIT_VOCABULARY = {
    # weight
    "g", "gr", "gramme", "grammes", "gram", "grams",
    "kg", "kilo", "kilos", "kilogramme", "kilogrammes", "kilogram", "kilograms",
    "mg",
    "oz", "once", "onces", "ounce", "ounces",
    "lb", "lbs", "livre", "livres", "pound", "pounds",
    # volume
    "ml", "cl", "dl", "l",
    "litre", "litres", "liter", "liters",
    "tasse", "tasses", "cup", "cups",
    "cuillère", "cuillères", "cuillere", "cuilleres",
    "cuillère à soupe", "cuillères à soupe", "cuillère à thé", "cuillères à thé",
    "cuillère à café", "cuillères à café",
    "c. à soupe", "c. à s.", "c. à thé", "c. à t.", "c. à café", "c.s.", "c.t.",
    "tbsp", "tbs", "tsp", "tablespoon", "tablespoons", "teaspoon", "teaspoons",
    "pinte", "pintes", "pint", "pints", "quart", "quarts",
    # count-like
    "tranche", "tranches", "slice", "slices",
    "gousse", "gousses", "clove", "cloves",
    "tête", "têtes", "head", "heads",
    "pincée", "pincées", "pinch", "pinches",
    "poignée", "poignées", "handful", "handfuls",
    "boîte", "boîtes", "boite", "boites", "can", "cans",
    "paquet", "paquets", "package", "packages", "sachet", "sachets",
    "botte", "bottes", "bouquet", "bouquets", "bunch", "bunches",
    "brin", "brins", "sprig", "sprigs",
    "morceau", "morceaux", "piece", "pieces", "pièce", "pièces",
    "unité", "unités", "douzaine", "douzaines", "dozen",
    "filet", "filets", "bâton", "bâtons", "stick", "sticks",
    "zeste", "trait", "dash",
}

# Conversion of units to a base measure: grams (weight), millilitres (volume)
# or items (count). Longest keys are tried first.
UNIT_CONVERSIONS: Dict[str, Tuple[str, float]] = {
    "kilogramme": ("weight", 1000),
    "kilogram": ("weight", 1000),
    "kilo": ("weight", 1000),
    "kg": ("weight", 1000),
    "mg": ("weight", 0.001),
    "gramme": ("weight", 1),
    "gram": ("weight", 1),
    "gr": ("weight", 1),
    "g": ("weight", 1),
    "once": ("weight", 28.35),
    "ounce": ("weight", 28.35),
    "oz": ("weight", 28.35),
    "livre": ("weight", 453.6),
    "pound": ("weight", 453.6),
    "lbs": ("weight", 453.6),
    "lb": ("weight", 453.6),
    "cuillère à soupe": ("volume", 15),
    "cuillere a soupe": ("volume", 15),
    "c. à soupe": ("volume", 15),
    "c. à s.": ("volume", 15),
    "c.s.": ("volume", 15),
    "tablespoon": ("volume", 15),
    "tbsp": ("volume", 15),
    "tbs": ("volume", 15),
    "cuillère à thé": ("volume", 5),
    "cuillère à café": ("volume", 5),
    "cuillere a the": ("volume", 5),
    "c. à thé": ("volume", 5),
    "c. à t.": ("volume", 5),
    "c. à café": ("volume", 5),
    "c.t.": ("volume", 5),
    "teaspoon": ("volume", 5),
    "tsp": ("volume", 5),
    "cuillère": ("volume", 15),
    "cuillere": ("volume", 15),
    "tasse": ("volume", 250),
    "cup": ("volume", 250),
    "pinte": ("volume", 568),
    "pint": ("volume", 473),
    "quart": ("volume", 946),
    "litre": ("volume", 1000),
    "liter": ("volume", 1000),
    "ml": ("volume", 1),
    "cl": ("volume", 10),
    "dl": ("volume", 100),
    "l": ("volume", 1000),
    "douzaine": ("count", 12),
    "dozen": ("count", 12),
}

COUNT_UNITS = {
    "tranche", "slice", "gousse", "clove", "tête", "tete", "head", "unité", "unite",
    "morceau", "piece", "pièce", "filet", "bâton", "baton", "stick",
}

COUNTABLE_INGREDIENT_HINTS = [
    "œuf", "oeuf", "egg", "gousse", "clove", "tranche", "slice", "tête", "head", "unité",
]

# Filter tokens that describe a recipe without needing textual proof.
OPTIONAL_FILTERS = {"rapide", "economique", "sante", "comfort", "facile", "gourmet"}

FILTER_VALIDATION_TERMS: Dict[str, List[str]] = {
    "proteine": ["protéine", "proteine", "protein", "riche en protéines", "high protein", "high-protein"],
    "dessert": [
        "dessert", "gâteau", "gateau", "cake", "tarte", "tart", "muffin", "brownie", "cookie",
        "biscuit", "pudding", "crème", "creme", "mousse", "sorbet", "glace",
    ],
    "smoothie": ["smoothie", "smoothies"],
    "soupe": ["soupe", "soup", "potage", "bouillon", "bisque", "chowder"],
    "salade": ["salade", "salad"],
    "petit-dejeuner": ["petit-déjeuner", "petit dejeuner", "breakfast", "déjeuner", "dejeuner", "matin"],
    "dejeuner": ["déjeuner", "dejeuner", "lunch", "midi"],
    "diner": ["dîner", "diner", "dinner", "soir"],
    "souper": ["souper", "supper", "dîner", "diner", "soir"],
    "collation": ["collation", "snack", "goûter", "gouter", "encas"],
    "pates": [
        "pâtes", "pates", "pasta", "spaghetti", "penne", "linguine", "fettuccine", "macaroni",
        "rigatoni", "fusilli", "ravioli", "lasagne", "lasagna",
    ],
    "pizza": ["pizza", "pizzas"],
    "grille": [
        "grill", "grillé", "grille", "grillée", "grillee", "grillés", "grilles", "barbecue", "bbq",
        "au grill", "sur le grill", "grilled", "grilling", "charcoal", "charbon",
    ],
    "vegetarien": ["végétarien", "vegetarien", "vegetarian", "sans viande", "no meat", "meatless"],
    "vegan": ["végétalien", "vegetalien", "vegan", "végan", "vegane", "plant-based", "sans produits animaux"],
    "sans-gluten": ["sans gluten", "gluten-free", "sans-gluten", "gluten free", "sans blé", "glutenfree", "gf"],
    "keto": ["keto", "cétogène", "cetogene", "ketogenic", "low carb", "faible en glucides", "low-carb", "keto-friendly"],
    "paleo": ["paléo", "paleo", "paleolithic", "paléolithique", "paleo diet"],
    "halal": ["halal"],
    "casher": ["casher", "kosher", "cacher"],
    "pescetarien": ["pescétarien", "pescetarien", "pescatarian", "pesco-végétarien", "pesco-vegetarian"],
    "rapide": [
        "rapide", "quick", "fast", "moins de 30 minutes", "30 minutes", "15 minutes", "20 minutes",
        "en 15 min", "en 20 min", "en 30 min",
    ],
    "economique": [
        "économique", "economique", "pas cher", "bon marché", "bon marche", "cheap", "budget",
        "affordable", "low cost",
    ],
    "sante": ["santé", "sante", "healthy", "health", "nutritif", "nutritive", "nutrition", "nutritious"],
    "comfort": ["réconfort", "reconfort", "comfort", "réconfortant", "reconfortant", "comfort food", "réconfortante"],
    "facile": ["facile", "easy", "simple", "simplement", "simples", "simplicity"],
    "gourmet": ["gourmet", "raffiné", "raffine", "sophistiqué", "sophistique", "refined", "sophisticated"],
    "sans-cuisson": ["sans cuisson", "no cook", "raw", "cru", "non cuit", "non cuite", "no-cook", "uncooked"],
    "japonais": [
        "japonais", "japanese", "japonaise", "sushi", "sashimi", "ramen", "teriyaki", "tempura", "miso",
        "yakitori", "udon", "soba", "tonkatsu", "katsu", "bento", "japon",
    ],
    "mexicain": [
        "mexicain", "mexican", "mexicaine", "tacos", "burrito", "enchilada", "quesadilla", "fajitas",
        "guacamole", "salsa", "tortilla", "chili", "mexique", "tex-mex",
    ],
    "indien": [
        "indien", "indian", "indienne", "curry", "tikka", "masala", "biryani", "dal", "naan", "samosa",
        "tandoori", "korma", "vindaloo", "inde",
    ],
    "italien": [
        "italien", "italian", "italienne", "pasta", "pâtes", "risotto", "pizza", "lasagne", "lasagna",
        "carbonara", "bolognese", "parmesan", "mozzarella", "italie",
    ],
    "chinois": [
        "chinois", "chinese", "chinoise", "stir-fry", "wok", "sauté", "sweet and sour", "aigre-doux",
        "kung pao", "general tao", "chow mein", "fried rice", "riz frit", "chine",
    ],
    "thailandais": [
        "thaïlandais", "thai", "thailandais", "thailandaise", "pad thai", "curry", "tom yum", "green curry",
        "curry vert", "red curry", "curry rouge", "coconut", "noix de coco", "thaï", "thailande",
    ],
    "mediterraneen": [
        "méditerranéen", "mediterranean", "mediterraneen", "méditerranéenne", "grec", "greek", "grecque",
        "tzatziki", "hummus", "houmous", "falafel", "taboulé", "taboule", "olive", "feta", "méditerranée",
    ],
    "marocain": [
        "marocain", "moroccan", "marocaine", "tagine", "couscous", "tajine", "harira", "pastilla",
        "basteeya", "kefta", "merguez", "ras el hanout", "zaalouk", "charmoula", "maroc", "morocco",
    ],
}

# Allergy tags to the words that betray the allergen, matched as whole words.
ALLERGY_TERMS: Dict[str, List[str]] = {
    "gluten": [
        "gluten", "blé", "ble", "wheat", "farine", "flour", "pain", "bread", "pâtes", "pates", "pasta",
        "orge", "barley", "seigle", "rye", "couscous", "chapelure", "breadcrumbs",
    ],
    "lactose": [
        "lait", "milk", "fromage", "fromages", "cheese", "beurre", "butter", "crème", "creme", "cream",
        "yogourt", "yaourt", "yogurt", "mozzarella", "parmesan", "cheddar", "ricotta", "feta",
    ],
    "arachides": ["arachide", "arachides", "cacahuète", "cacahuètes", "peanut", "peanuts", "beurre d'arachide"],
    "noix": [
        "noix", "nut", "nuts", "amande", "amandes", "almond", "almonds", "noisette", "noisettes",
        "hazelnut", "hazelnuts", "pacane", "pacanes", "pecan", "pecans", "cajou", "cashew", "cashews",
        "pistache", "pistaches", "pistachio", "walnut", "walnuts",
    ],
    "soja": ["soja", "soya", "soy", "tofu", "edamame", "tempeh", "miso", "sauce soya"],
    "poisson": [
        "poisson", "poissons", "fish", "saumon", "salmon", "thon", "tuna", "morue", "cod", "tilapia",
        "truite", "trout", "sardine", "sardines", "anchois", "anchovy", "anchovies", "aiglefin", "haddock",
    ],
    "crustaces": [
        "crustacé", "crustacés", "crustace", "crustaces", "crevette", "crevettes", "shrimp", "homard",
        "lobster", "crabe", "crab", "langoustine", "langoustines",
    ],
    "fruits-de-mer": [
        "fruits de mer", "seafood", "crevette", "crevettes", "shrimp", "moule", "moules", "mussel",
        "mussels", "pétoncle", "pétoncles", "scallop", "scallops", "huître", "huîtres", "oyster",
        "oysters", "calmar", "calmars", "squid", "homard", "lobster", "crabe", "crab",
    ],
    "oeufs": ["oeuf", "oeufs", "œuf", "œufs", "egg", "eggs", "omelette", "omelet", "mayonnaise", "quiche"],
    "sulfites": ["sulfite", "sulfites", "vin", "wine", "vinaigre de vin"],
    "sesame": ["sésame", "sesame", "tahini", "tahin"],
    "moutarde": ["moutarde", "mustard", "dijon"],
}

MEAL_TYPE_ALIASES = {
    "souper": "dinner",
    "supper": "dinner",
    "dinner": "dinner",
    "diner": "lunch",
    "dîner": "lunch",
    "dejeuner": "lunch",
    "lunch": "lunch",
    "petit-dejeuner": "breakfast",
    "breakfast": "breakfast",
    "collation": "snack",
    "snack": "snack",
}

DESSERT_TERMS = [
    "dessert", "desserts", "gâteau", "gâteaux", "gateau", "gateaux", "cake", "cakes", "cupcake",
    "cupcakes", "cheesecake", "muffin", "muffins", "brownie", "brownies", "biscuit", "biscuits",
    "cookie", "cookies", "galettes à l'avoine", "carré aux dattes", "carrés aux dattes",
    "pudding", "pouding", "pouding chômeur", "crème brûlée", "creme brulee", "crème glacée",
    "creme glacee", "ice cream", "sorbet", "granité", "mousse au chocolat", "chocolate mousse",
    "tiramisu", "panna cotta", "flan", "clafoutis", "crumble", "croustade", "tarte au sucre",
    "tarte aux pommes", "tarte au citron", "tarte aux fraises", "tarte aux bleuets", "pie",
    "sucre à la crème", "fudge", "caramel", "macaron", "macarons", "meringue", "meringues",
    "beigne", "beignes", "donut", "donuts", "doughnut", "pain aux bananes", "banana bread",
    "crêpes sucrées", "gaufre", "gaufres", "waffle", "waffles", "madeleine", "madeleines",
    "truffe", "truffes", "friandise", "friandises", "sucrerie", "sucreries", "glaçage",
    "frosting", "bûche", "buche", "éclair", "éclairs", "profiterole", "profiteroles",
    "tartelette", "tartelettes", "biscotti", "scone", "scones", "shortcake", "pavlova",
    "chocolat chaud", "compote", "smoothie bowl",
]

TIP_PAGE_PATTERNS = [
    r"\b(astuce|astuces|conseil|conseils|truc|trucs|trucs?\s+et\s+astuces?)\b",
    r"\b(comment\s+faire|comment\s+préparer|comment\s+cuisiner)\b",
    r"\b(guide|guides|tutoriel|tutoriels)\b",
    r"\b(meilleures?\s+façons?|meilleures?\s+manières?)\b",
    r"\b(tips|how\s+to\s+make|how\s+to\s+cook|tutorial)\b",
]

LIST_PAGE_PATTERN = r"\b(\d+)\s+(recettes?|repas|idées?|suggestions?|plats?|menus?|recipes|ideas)\b"

COMPILATION_PATTERNS = [
    r"\b(compilation|galerie|sélection|collection|top\s+\d+|meilleures?\s+recettes?|roundup|round-up)\b",
    r"^(découvrez|voici|consultez|explorez|nos|les)\s+(\d+)\s+(recettes?|repas|idées?)",
]

LISTING_DOMAINS = ["yummly.com", "cookpad.com"]

LISTING_URL_PATTERNS = [
    r"/(list|lists|collection|collections|gallery|galleries|ideas|idees)",
    r"/(\d+)[-\s]+(recettes?|recipes?)",
]

ENGLISH_RECIPE_VOCABULARY = [
    r"\bcups?\b", r"\btablespoons?\b", r"\bteaspoons?\b", r"\btbsp\b", r"\btsp\b",
    r"\bounces?\b", r"\bpounds?\b", r"\blbs?\b",
    r"\bpreheat\b", r"\bbake\b", r"\bstir\b", r"\bwhisk\b", r"\bchop\b", r"\bsimmer\b",
    r"\bingredients\b", r"\bdirections\b", r"\binstructions\b",
    r"\brecipe\b", r"\bthe\b", r"\bwith\b",
]

FRENCH_RECIPE_VOCABULARY = [
    r"\brecettes?\b", r"\btasses?\b", r"\bcuillères?\b", r"\bc\. à\b",
    r"\bingrédients\b", r"\bpréparation\b", r"\bcuisson\b", r"\bmélanger\b", r"\bajouter\b",
    r"\bfour\b", r"\bpoêle\b", r"\bavec\b", r"\bpour\b", r"\bles\b", r"\bdes\b", r"\baux?\b",
    r"\bfacile\b", r"\bmaison\b",
]

# Ordered cheapest first; the first bucket with a matching keyword wins.
COST_CATEGORIES: List[Tuple[str, List[str], float]] = [
    (
        "starches_legumes",
        [
            "pâtes", "pates", "spaghetti", "riz", "lentilles", "haricots", "tofu", "légumes", "salade",
            "pasta", "lentils", "beans", "chickpeas", "pois chiches",
        ],
        5.0,
    ),
    (
        "poultry_pork_egg",
        ["poulet", "porc", "jambon", "saucisse", "œuf", "oeuf", "omelette", "chicken", "pork", "sausage"],
        8.0,
    ),
    (
        "beef_cheese_fish",
        ["bœuf", "boeuf", "steak", "hamburger", "fromage", "thon", "poisson", "beef", "cheese", "tuna", "fish"],
        12.0,
    ),
    ("salmon_shrimp_lamb", ["saumon", "crevette", "homard", "filet", "agneau", "veau", "salmon", "shrimp", "lamb", "veal"], 18.0),
    ("delicacies", ["homard", "crabe", "coquilles", "foie gras", "lobster", "crab", "scallops"], 25.0),
]

DEFAULT_BASE_COST = 10.0
DEFAULT_ESTIMATED_COST = 10.0
MIN_RULE_COST = 3.0
MAX_RULE_COST = 50.0
MAX_LLM_COST = 200.0

BUDGET_TERMS = ["économique", "economique", "pas cher", "budget", "cheap"]
GOURMET_TERMS = ["gourmet", "raffiné", "raffine", "premium"]
QUICK_TERMS = ["rapide", "simple", "facile", "15 minutes", "30 minutes", "quick", "easy"]
PREMIUM_INGREDIENTS = ["saumon", "crevette", "bœuf", "boeuf", "fromage", "champignon"]

BUDGET_MULTIPLIER = 0.7
GOURMET_MULTIPLIER = 1.5
QUICK_MULTIPLIER = 0.9
PREMIUM_MULTIPLIER = 1.2
PREMIUM_THRESHOLD = 3

# Query suffixes used to widen the search when the primary query is too narrow.
QUERY_VARIANT_SUFFIXES = [
    "facile",
    "maison",
    "rapide",
    "santé",
    "au four",
    "mijoteuse",
    "québécoise",
    "souper",
]
