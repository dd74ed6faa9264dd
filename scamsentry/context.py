# context.py
"""
Post-scan context rules.

Drops matches that are too short or not on a word boundary, looks at which
categories co-occur in the message, rewrites each match weight in a fixed
order and derives an additive context boost:

  1. single-word, not high-confidence      x 0.50 / 0.65 / 0.80
  2. generic term                          x 0.40 / 0.60 / 0.75
  3. message looks like a legit business   x 0.50
  4. critical category combination         x 1.15
  5. high-confidence multi-word phrase     x 1.10

(factor columns are for <=1 / 2 / >=3 categories present)
"""
import logging
import re
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Sequence, Tuple

from .config import ContextConfig
from .model import Category, Match, RISK_CATEGORIES

logger = logging.getLogger(__name__)

C = Category
CRITICAL_COMBINATIONS: Tuple[FrozenSet[Category], ...] = (
    frozenset({C.URGENCY, C.FINANCIAL, C.PHISHING}),
    frozenset({C.FINANCIAL, C.PHISHING, C.URL}),
    frozenset({C.URGENCY, C.PHISHING, C.URL}),
    frozenset({C.IMPERSONATION, C.PHISHING, C.URL}),
    frozenset({C.URGENCY, C.IMPERSONATION, C.PHISHING}),
)

# multi-word phrases from these categories are high-confidence
HIGH_CONFIDENCE_CATEGORIES = frozenset({C.URGENCY, C.FINANCIAL, C.PHISHING})

GENERIC_TERMS = frozenset([
    "win", "earn", "money", "cash", "income", "profit", "pera", "claim", "prize",
    "reward", "loan", "libre", "free", "update", "confirm", "verify", "official",
    "authorized", "government", "avail", "immediate", "expire", "expires",
    "smart", "globe", "congratulations",
])

BOUNDARY_CHARS = frozenset(".,!?;:()[]{}\"'`")
URLISH_PAT = re.compile(r"://|\bwww\.|[a-z0-9-]\.[a-z]{2,}\b|[a-z0-9]/", re.IGNORECASE)

LEGIT_SIGNATURES = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\b(?:ref(?:erence)?|txn|trans(?:action)?)\.?\s*(?:no\.?|number|id|#)?\s*[:#]?\s*[a-z0-9]*\d[a-z0-9]{4,}\b",
    r"\b(?:reply|text|send)\s+stop\b",
    r"\b(?:unsubscribe|opt[\s-]?out)\b",
    r"\byour\s+order\s+(?:#?\s*[a-z0-9-]+\s+)?(?:has\s+been\s+|is\s+|was\s+)?(?:confirmed|shipped|delivered|out\s+for\s+delivery)\b",
    r"\bnever\s+share\s+your\s+(?:otp|pin|password|mpin)\b",
    r"\bthank\s+you\s+for\s+(?:your\s+)?(?:payment|purchase|order)\b",
    r"\byou\s+have\s+(?:received|paid|sent)\s+(?:php|p|₱)\s?[\d,]+(?:\.\d{2})?",
))


def is_word_boundary(ch: str) -> bool:
    return ch.isspace() or ch in BOUNDARY_CHARS

def is_urlish(pattern: str) -> bool:
    return bool(URLISH_PAT.search(pattern))

def is_single_word(pattern: str) -> bool:
    return " " not in pattern.strip()

def is_high_confidence(m: Match) -> bool:
    if m.category is Category.URL or is_urlish(m.pattern):
        return True
    return m.category in HIGH_CONFIDENCE_CATEGORIES and not is_single_word(m.pattern)

def is_generic(m: Match) -> bool:
    return m.pattern.strip().lower() in GENERIC_TERMS and not is_urlish(m.pattern)

def looks_legitimate(text: str) -> bool:
    return any(p.search(text) for p in LEGIT_SIGNATURES)

def critical_combination(categories: Iterable[Category]) -> bool:
    present = frozenset(categories)
    return any(combo <= present for combo in CRITICAL_COMBINATIONS)


@dataclass(frozen=True)
class Adjustment:
    matches: Tuple[Match, ...]
    boost: float
    categories: FrozenSet[Category] = frozenset()
    critical: bool = False
    legitimate: bool = False
    reasons: Tuple[str, ...] = field(default_factory=tuple)


class ContextAdjuster:

    def __init__(self, cfg: ContextConfig = ContextConfig()):
        self.cfg = cfg

    def is_valid(self, m: Match, text: str) -> bool:
        n = len(text)
        if not 0 <= m.start <= m.end <= n:
            return False
        if len(text[m.start:m.end].strip()) < self.cfg.min_span_chars:
            return False
        left_ok  = m.start == 0 or is_word_boundary(text[m.start - 1])
        right_ok = m.end == n or is_word_boundary(text[m.end])
        return left_ok and right_ok

    def _tier(self, n_categories: int) -> int:
        if n_categories <= 1:
            return 0
        return 1 if n_categories == 2 else 2

    def combination_boost(self, n_categories: int, critical: bool) -> float:
        base = self.cfg.base_boost
        if n_categories >= 4:
            return 1.5 * base
        if n_categories == 3 and critical:
            return base
        if n_categories == 2:
            return 0.4 * base
        return 0.0

    def reweigh(self, m: Match, n_categories: int, critical: bool, legitimate: bool) -> Match:
        if m.category is Category.LEGIT:
            return replace(m, weight=0.0)
        cfg, tier = self.cfg, self._tier(n_categories)
        single = is_single_word(m.pattern)
        high = is_high_confidence(m)
        w = m.weight
        if single and not high:
            w *= cfg.single_word_scale[tier]
        if is_generic(m):
            w *= cfg.generic_term_scale[tier]
        if legitimate:
            w *= cfg.legit_scale
        if critical:
            w *= cfg.critical_scale
        if high and not single:
            w *= cfg.high_conf_scale
        return replace(m, weight=round(w, 4))

    def adjust(self, raw: Sequence[Match], text: str) -> Adjustment:
        if not text or not raw:
            return Adjustment(matches=(), boost=0.0)

        valid: List[Match] = [m for m in raw if self.is_valid(m, text)]
        categories = frozenset(m.category for m in valid if m.category in RISK_CATEGORIES)
        n_cat = len(categories)
        critical = critical_combination(categories)
        legitimate = looks_legitimate(text) or any(m.category is Category.LEGIT for m in valid)

        reasons = []
        boost = self.combination_boost(n_cat, critical)
        if critical:
            reasons.append("critical category combination")
        if legitimate:
            reasons.append("legitimate business signature")

        matches = tuple(self.reweigh(m, n_cat, critical, legitimate) for m in valid)

        if valid and len(valid) / len(text) * 100 >= self.cfg.density_threshold:
            boost += self.cfg.density_bonus
            reasons.append("dense indicators")
        if len(valid) == 1 and not critical:
            boost -= self.cfg.isolation_penalty
            reasons.append("isolated indicator")
        boost = max(0.0, boost)

        logger.debug("context: %d/%d valid, categories=%s, critical=%s, boost=%.2f",
                     len(valid), len(raw), sorted(c.name for c in categories), critical, boost)
        return Adjustment(matches, boost, categories, critical, legitimate, tuple(reasons))
