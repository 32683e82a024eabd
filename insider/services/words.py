"""
Service: words.py
Rôle:
- Catalogue statique des mots secrets que le groupe doit deviner.
- `pick_random_word(rng)` : tirage uniforme (rng injectable pour les tests).

Notes:
- Liste anglaise uniquement ; des noms concrets, faciles à faire deviner par oui/non.
"""
import random
from typing import Optional

WORD_LIST = [
    "apple", "anchor", "airplane", "avocado", "backpack", "balloon", "banana", "bicycle",
    "blanket", "bridge", "butterfly", "cactus", "camera", "candle", "castle", "chimney",
    "clock", "cloud", "compass", "cookie", "crown", "diamond", "dinosaur", "dolphin",
    "dragon", "drum", "elephant", "envelope", "feather", "fireworks", "flamingo", "fountain",
    "giraffe", "glacier", "guitar", "hammer", "harbor", "helicopter", "honey", "igloo",
    "island", "jellyfish", "kangaroo", "kettle", "kite", "ladder", "lantern", "lemon",
    "lighthouse", "lobster", "magnet", "map", "microscope", "mirror", "mountain", "mushroom",
    "necklace", "notebook", "octopus", "orchestra", "owl", "paintbrush", "parachute", "penguin",
    "piano", "pillow", "pirate", "pizza", "pyramid", "rainbow", "robot", "rocket",
    "sandcastle", "satellite", "scarecrow", "scissors", "skateboard", "snowman", "spider", "submarine",
    "sunflower", "suitcase", "telescope", "tent", "thermometer", "tornado", "tractor", "treasure",
    "trumpet", "umbrella", "unicorn", "vampire", "violin", "volcano", "waterfall", "whale",
    "windmill", "wizard", "yacht", "zebra",
]


def pick_random_word(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(WORD_LIST)
