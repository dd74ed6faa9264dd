# pipeline.py
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .ac import Aho, build_automaton
from .config import ContextConfig, ScoringConfig
from .context import Adjustment, ContextAdjuster
from .model import Category, Match, Pattern, RISK_CATEGORIES, ScanResult
from .patterns import build_table, default_patterns
from .scoring import ScoreNormalizer, dedupe_matches, total_weight
from .url_dfa import UrlRecognizer

logger = logging.getLogger(__name__)

RISK_LEVELS = ((80.0, "CRITICAL"), (60.0, "HIGH"), (35.0, "MEDIUM"))


class ScanPipeline:
    """
    text -> {one automaton per category, URL recognizer} -> context rules
         -> (category, start, end) dedup -> saturating score.

    Build once at startup and share; `scan` does not mutate anything it holds.
    """

    def __init__(self,
                 automata: Iterable[Aho],
                 url_recognizer: Optional[UrlRecognizer] = None,
                 adjuster: Optional[ContextAdjuster] = None,
                 normalizer: Optional[ScoreNormalizer] = None):
        self.automata: Tuple[Aho, ...] = tuple(sorted(automata, key=lambda a: list(Category).index(a.category)))
        self.url_recognizer = url_recognizer if url_recognizer is not None else UrlRecognizer()
        self.adjuster = adjuster if adjuster is not None else ContextAdjuster()
        self.normalizer = normalizer if normalizer is not None else ScoreNormalizer()

    @classmethod
    def from_patterns(cls,
                      patterns: Optional[Mapping] = None,
                      *,
                      context: ContextConfig = ContextConfig(),
                      scoring: ScoringConfig = ScoringConfig(),
                      url_recognizer: Optional[UrlRecognizer] = None) -> "ScanPipeline":
        table: Dict[Category, List[Pattern]] = default_patterns() if patterns is None else build_table(patterns)
        automata = [build_automaton(pats, cat) for cat, pats in table.items() if pats]
        logger.debug("Pipeline built with %d category automata", len(automata))
        return cls(automata, url_recognizer, ContextAdjuster(context), ScoreNormalizer(scoring))

    def raw_matches(self, text: str) -> List[Match]:
        raw: List[Match] = []
        for ac in self.automata:
            for m in ac.finditer(text):
                raw.append(Match(m.pattern, round(m.weight, 2), m.category, m.start, m.end))
        raw.extend(self.url_recognizer.scan(text))
        return raw

    def adjust(self, text: str) -> Adjustment:
        return self.adjuster.adjust(self.raw_matches(text), text)

    def scan(self, text: str) -> ScanResult:
        if not isinstance(text, str):
            text = "" if text is None else str(text)
        if not text:
            return ScanResult(score=0.0, matches=())
        adj = self.adjust(text)
        matches = dedupe_matches(adj.matches)
        total = total_weight(matches, adj.boost)
        result = ScanResult(score=self.normalizer.score(total), matches=tuple(matches))
        logger.debug("scan: %d chars, %d matches, total=%.2f, score=%.2f",
                     len(text), len(matches), total, result.score)
        return result


def build_pipeline(patterns: Optional[Mapping] = None, **kwargs) -> ScanPipeline:
    return ScanPipeline.from_patterns(patterns, **kwargs)


# ---- explanation ---------------------------------------------------------------
@dataclass(frozen=True)
class Analysis:
    score: float
    risk_level: str
    confidence: float
    categories: Tuple[Category, ...]
    total_matches: int
    average_weight: float
    flags: Dict[str, bool] = field(default_factory=dict)


def risk_level(score: float) -> str:
    for threshold, name in RISK_LEVELS:
        if score >= threshold:
            return name
    return "LOW"


def analyze(result: ScanResult, text: str) -> Analysis:
    matches = result.matches
    cats = tuple(c for c in RISK_CATEGORIES if c in result.categories)
    n = len(matches)
    avg = round(sum(m.weight for m in matches) / n, 2) if n else 0.0
    density = round(n / (len(text) / 10), 2) if text else 0.0
    diversity = round(len(cats) / len(RISK_CATEGORIES), 2)
    confidence = round(min(1.0, density * 0.3 + diversity * 0.4 + avg * 0.3), 2)
    return Analysis(
        score=result.score,
        risk_level=risk_level(result.score),
        confidence=confidence,
        categories=cats,
        total_matches=n,
        average_weight=avg,
        flags={f"has_{c.name.lower()}": c in result.categories for c in RISK_CATEGORIES},
    )


def explain(result: ScanResult, text: str = "") -> str:
    a = analyze(result, text)
    parts = [
        f"Score: {a.score:.2f}%",
        f"Risk Level: {a.risk_level}",
        f"Confidence: {a.confidence * 100:.0f}%",
    ]
    if a.categories:
        parts.append("Detected: " + ", ".join(c.name for c in a.categories))
    return "\n".join(parts)
