"""
starnames.py
============
Unique star names and thematic nicknames.

Star names are mandatory: ``generate_star_name`` either returns a fresh name
or raises ``NameExhaustionError``.  Nicknames are best effort:
``generate_nickname`` returns ``None`` when no unused nickname turns up
within its attempt budget.

Both functions take the shared ``RandomSource`` and the uniqueness set they
check against, and add to that set only when they return a value.
"""

from __future__ import annotations

import enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

from hazards import HazardKind
from randsource import RandomSource


STAR_NAME_ATTEMPTS = 500
NICKNAME_ATTEMPTS = 120


class GenerationError(RuntimeError):
    """Base class for failures raised while generating a universe."""


class NameExhaustionError(GenerationError):
    """No unused star name was found within ``STAR_NAME_ATTEMPTS`` tries."""


# ---------------------------------------------------------------------------
# Star names
# ---------------------------------------------------------------------------

NAME_ONSETS = [
    "st", "dr", "kr", "m", "n", "v", "th", "z", "gl", "pr", "t", "k", "r", "s", "l",
]
NAME_VOWELS = ["a", "e", "i", "o", "u", "ae", "ia", "ai", "oo"]
NAME_CODAS = ["n", "r", "s", "th", "l", "x", "k", "m", "sh"]
NAME_ENDINGS = ["os", "ar", "en", "ion", "is", "or", "un", "eth", "eus"]

# Fragment pools per template, in draw order.
_STAR_TEMPLATES: List[Tuple[List[str], ...]] = [
    (NAME_ONSETS, NAME_VOWELS, NAME_ENDINGS),
    (NAME_ONSETS, NAME_VOWELS, NAME_CODAS, NAME_ENDINGS),
    (NAME_ONSETS, NAME_VOWELS, NAME_ONSETS, NAME_VOWELS, NAME_ENDINGS),
    (NAME_ONSETS, NAME_VOWELS, NAME_ENDINGS, NAME_CODAS),
]


def _star_name_candidate(rng: RandomSource) -> str:
    template = _STAR_TEMPLATES[rng.uniform_int(0, len(_STAR_TEMPLATES) - 1)]
    return "".join(rng.choice(pool) for pool in template)


def generate_star_name(rng: RandomSource, used_names: Set[str]) -> str:
    """Return a pronounceable star name not yet in *used_names*.

    The name is added to *used_names* before it is returned.

    Raises
    ------
    NameExhaustionError
        After ``STAR_NAME_ATTEMPTS`` consecutive collisions.
    """
    for _ in range(STAR_NAME_ATTEMPTS):
        candidate = _star_name_candidate(rng)
        name = candidate[:1].upper() + candidate[1:]
        if name not in used_names:
            used_names.add(name)
            return name

    raise NameExhaustionError(
        f"no unique star name after {STAR_NAME_ATTEMPTS} attempts "
        f"({len(used_names):,} names in use)"
    )


# ---------------------------------------------------------------------------
# Nicknames
# ---------------------------------------------------------------------------

ARTICLES = ["The", "A", "This", "That"]
ADJECTIVES = [
    "Silent", "Vagrant", "Crimson", "Iron", "Glass", "Blue", "Fallen",
    "Wandering", "Hidden", "Verdant", "Ashen", "Amber", "Sable", "Gilded",
    "Fractured", "Distant", "Last", "First", "Forgotten", "Radiant", "Cold",
    "Crowned", "Broken", "Lonely", "Burning", "Restless", "Sleeping",
    "Shattered", "Veiled", "Northern", "Southern", "Eastern", "Western",
    "Drifting", "Silver",
]
NOUNS = [
    "Garden", "Anvil", "Wake", "Halo", "Drifter", "Chorus", "Spire", "Tide",
    "Beacon", "Crown", "Forge", "Harbor", "Passage", "Pilgrim", "Pilgrimage",
    "Whisper", "Ember", "Comet", "Siren", "Step", "Gate", "Veil", "Crossing",
    "Hearth", "Dawn", "Dusk", "Eclipse", "Bridge", "Hollow", "Gulf", "Ridge",
    "Memory",
]
VERBS = [
    "Waits", "Sleeps", "Echoes", "Burns", "Drifts", "Remains", "Flickers",
    "Stands", "Watches", "Fades",
]

THEMED_ADJECTIVES: Dict[HazardKind, List[str]] = {
    HazardKind.RADIATION: ["Irradiated", "Ionic", "Radiant", "Searing"],
    HazardKind.PIRATES:   ["Corsair", "Rogue", "Scarred", "Bloodied"],
    HazardKind.DEBRIS:    ["Shattered", "Broken", "Sundered", "Twisted"],
}
THEMED_NOUNS: Dict[HazardKind, List[str]] = {
    HazardKind.RADIATION: ["Flare", "Pulse", "Glow"],
    HazardKind.PIRATES:   ["Cutlass", "Raid", "Corsair", "Marauder"],
    HazardKind.DEBRIS:    ["Wreck", "Shard", "Graveyard"],
}

ARTICLE_CHANCE = 0.85
VERB_CHANCE = 0.35
THEME_CHANCE = 0.35


class Token(enum.Enum):
    ARTICLE = "article"
    ADJECTIVE = "adjective"
    NOUN = "noun"
    VERB = "verb"


# (token sequence, weight)
NICKNAME_PATTERNS: List[Tuple[Tuple[Token, ...], int]] = [
    ((Token.NOUN,), 4),
    ((Token.ADJECTIVE, Token.NOUN), 4),
    ((Token.ARTICLE, Token.NOUN), 3),
    ((Token.ARTICLE, Token.ADJECTIVE, Token.NOUN), 2),
    ((Token.ADJECTIVE, Token.ADJECTIVE, Token.NOUN), 1),
    ((Token.ARTICLE, Token.NOUN, Token.VERB), 1),
    ((Token.ADJECTIVE, Token.NOUN, Token.VERB), 1),
    ((Token.ARTICLE, Token.ADJECTIVE, Token.NOUN, Token.VERB), 1),
]
_TOTAL_WEIGHT = sum(w for _, w in NICKNAME_PATTERNS)


def _pick_pattern(rng: RandomSource) -> Tuple[Token, ...]:
    roll = rng.uniform_int(0, _TOTAL_WEIGHT - 1)
    for tokens, weight in NICKNAME_PATTERNS:
        if roll < weight:
            return tokens
        roll -= weight
    return NICKNAME_PATTERNS[0][0]


def _maybe(rng: RandomSource, options: Sequence[str], chance: float) -> Optional[str]:
    if rng.uniform_float() < chance:
        return rng.choice(options)
    return None


def _themed(
    rng: RandomSource,
    generic: Sequence[str],
    themed: Dict[HazardKind, List[str]],
    hazard_context: Sequence[HazardKind],
) -> str:
    # Only the first hazard kind sets the theme; no context means no roll.
    if hazard_context and rng.uniform_float() < THEME_CHANCE:
        return rng.choice(themed[hazard_context[0]])
    return rng.choice(generic)


def _render_token(
    rng: RandomSource, token: Token, hazard_context: Sequence[HazardKind]
) -> Optional[str]:
    if token is Token.ARTICLE:
        return _maybe(rng, ARTICLES, ARTICLE_CHANCE)
    if token is Token.VERB:
        return _maybe(rng, VERBS, VERB_CHANCE)
    if token is Token.ADJECTIVE:
        return _themed(rng, ADJECTIVES, THEMED_ADJECTIVES, hazard_context)
    return _themed(rng, NOUNS, THEMED_NOUNS, hazard_context)


def generate_nickname(
    rng: RandomSource,
    used_nicknames: Set[str],
    hazard_context: Sequence[HazardKind] = (),
) -> Optional[str]:
    """Return an unused nickname such as "The Crimson Anvil", or ``None``.

    *hazard_context* lists the hazard kinds of the body being named; its
    first entry may theme adjectives and nouns.  Each attempt picks a
    weighted token pattern, renders it, and discards empty results.
    """
    for _ in range(NICKNAME_ATTEMPTS):
        pattern = _pick_pattern(rng)
        parts = []
        for token in pattern:
            word = _render_token(rng, token, hazard_context)
            if word is not None:
                parts.append(word)
        if not parts:
            continue

        nickname = " ".join(parts)
        if nickname not in used_nicknames:
            used_nicknames.add(nickname)
            return nickname

    return None
