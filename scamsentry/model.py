# model.py
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple


class ConfigError(ValueError):
    """Raised while loading or building pattern configuration, never while scanning."""

class InvalidPattern(ConfigError):
    pass

class InvalidWeight(ConfigError):
    pass

class UnknownCategory(ConfigError):
    pass


class Category(Enum):
    URGENCY = "URGENCY"
    FINANCIAL = "FINANCIAL"
    PHISHING = "PHISHING"
    IMPERSONATION = "IMPERSONATION"
    URL = "URL"
    LEGIT = "LEGIT"

    @classmethod
    def parse(cls, name) -> "Category":
        """Case/spacing tolerant lookup: ' phishing ' -> Category.PHISHING."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise UnknownCategory(f"Unknown category {name!r}; expected one of {[c.name for c in cls]}") from None


# Categories that count towards combination analysis
RISK_CATEGORIES: Tuple[Category, ...] = (
    Category.URGENCY, Category.FINANCIAL, Category.PHISHING,
    Category.IMPERSONATION, Category.URL,
)


@dataclass(frozen=True)
class Pattern:
    keyword: str
    weight: float

    def __post_init__(self):
        if not isinstance(self.keyword, str) or not self.keyword.strip():
            raise InvalidPattern(f"Empty keyword: {self.keyword!r}")
        try:
            w = float(self.weight)
        except (TypeError, ValueError):
            raise InvalidWeight(f"Weight for {self.keyword!r} is not a number: {self.weight!r}") from None
        if math.isnan(w) or not 0.0 <= w <= 1.0:
            raise InvalidWeight(f"Weight for {self.keyword!r} outside [0,1]: {self.weight!r}")
        object.__setattr__(self, "weight", w)


@dataclass(frozen=True)
class Match:
    pattern: str
    weight: float
    category: Category
    start: int
    end: int          # exclusive

    @property
    def span(self) -> Tuple[int, int]:
        return self.start, self.end

    def to_dict(self) -> dict:
        return {
            "pattern": self.pattern,
            "weight": self.weight,
            "category": self.category.value,
            "start": self.start,
            "end": self.end,
        }


@dataclass(frozen=True)
class UrlMatch(Match):
    url_type: str = "domain"
    characteristics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScanResult:
    score: float
    matches: Tuple[Match, ...] = field(default_factory=tuple)

    @property
    def categories(self) -> FrozenSet[Category]:
        return frozenset(m.category for m in self.matches)

    def to_dict(self) -> dict:
        return {"score": self.score, "matches": [m.to_dict() for m in self.matches]}
