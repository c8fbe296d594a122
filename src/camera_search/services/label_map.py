"""Classifier label to catalog search term table.

Keys are classifier vocabulary (lowercase, underscores for spaces) as
produced by ImageNet-trained MobileNet models; values are the storefront's
French search terms. Re-curate and bump the version when the classifier
is swapped.
"""

LABEL_MAP_VERSION = "2024.1-mobilenet-imagenet"

LABEL_MAP: dict[str, str] = {
    # Sacs
    "handbag": "sac a main",
    "purse": "sac a main",
    "clutch": "pochette",
    "bag": "sac",
    "shopping_basket": "sac",
    "plastic_bag": "sac",
    "mailbag": "sac",
    "backpack": "sac a dos",
    "knapsack": "sac a dos",
    "pack": "sac a dos",
    # Chaussures
    "sandal": "sandales",
    "running_shoe": "baskets",
    "sneaker": "baskets",
    "shoe_shop": "chaussures",
    "loafer": "chaussures",
    "boot": "chaussures",
    "clog": "chaussures",
    "oxford": "chaussures",
    # Accessoires
    "wallet": "portefeuille",
    "billfold": "portefeuille",
    "sunglass": "lunettes",
    "sunglasses": "lunettes",
    "eyeglass": "lunettes",
    "watch": "montre",
    "digital_watch": "montre",
    "analog_clock": "montre",
    "necklace": "bijoux",
    "bracelet": "bijoux",
    "ring": "bijoux",
    # Parfums
    "perfume": "parfum",
    "lotion": "parfum",
    # Vetements
    "jersey": "vetements",
    "shirt": "vetements",
    "dress": "vetements",
    "suit": "vetements",
    "jean": "vetements",
    "miniskirt": "vetements",
    "skirt": "vetements",
    "coat": "vetements",
    "trench_coat": "vetements",
    "poncho": "vetements",
    "kimono": "vetements",
    "bikini": "vetements",
    "swimming_trunks": "vetements",
    "pajama": "vetements",
    "bow_tie": "vetements",
    "neck_brace": "accessoires",
    # Divers
    "hat": "chapeau",
    "sombrero": "chapeau",
    "cap": "casquette",
    "scarf": "foulard",
    "stole": "foulard",
    "umbrella": "parapluie",
    "belt": "ceinture",
    "buckle": "ceinture",
}


def search_terms() -> list[str]:
    """Return the distinct search terms in table order."""
    return list(dict.fromkeys(LABEL_MAP.values()))
