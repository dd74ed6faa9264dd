from .ac import Aho, build_automaton, scan as scan_automaton
from .context import Adjustment, ContextAdjuster
from .model import (
    Category, ConfigError, InvalidPattern, InvalidWeight, Match, Pattern,
    ScanResult, UnknownCategory, UrlMatch,
)
from .patterns import default_patterns, load_patterns
from .pipeline import Analysis, ScanPipeline, analyze, build_pipeline, explain
from .scoring import ScoreNormalizer, dedupe_matches
from .url_dfa import UrlRecognizer

__version__ = "0.1.0"
