# scoring.py
import math
from typing import Dict, Iterable, List, Tuple

from .config import ScoringConfig
from .model import Category, Match


def dedupe_matches(matches: Iterable[Match]) -> List[Match]:
    """One match per (category, start, end), keeping the heaviest. First-seen order is kept."""
    best: Dict[Tuple[Category, int, int], Match] = {}
    for m in matches:
        key = (m.category, m.start, m.end)
        if key not in best or best[key].weight < m.weight:
            best[key] = m
    return list(best.values())


def total_weight(matches: Iterable[Match], boost: float = 0.0) -> float:
    boost = boost if boost > 0 else 0.0          # also catches NaN
    total = round(boost, 2) + sum(m.weight for m in matches)
    if math.isnan(total) or total < 0:
        return 0.0
    return round(total, 2)


class ScoreNormalizer:
    """score = MAX * (1 - e^(-K * total)), snapped to 0 below MIN, 2 decimals."""

    def __init__(self, cfg: ScoringConfig = ScoringConfig()):
        self.cfg = cfg

    def raw(self, weight: float) -> float:
        if weight is None or math.isnan(weight) or weight <= 0:
            return 0.0
        value = self.cfg.max_score * (1 - math.exp(-self.cfg.k_factor * weight))
        return round(min(max(value, 0.0), self.cfg.max_score), 2)

    def score(self, weight: float) -> float:
        value = self.raw(weight)
        return 0.0 if value < self.cfg.min_score else value


def score(weight: float) -> float:
    return ScoreNormalizer().score(weight)
