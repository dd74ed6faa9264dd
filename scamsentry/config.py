# config.py
from dataclasses import dataclass

# ---------- Scoring ----------
K_FACTOR  = 1.5     # curve steepness of the saturating score
MAX_SCORE = 95.0    # hard cap, never reached
MIN_SCORE = 8.0     # anything below is noise -> 0

# ---------- Context ----------
BASE_BOOST         = 0.10
MIN_SPAN_CHARS     = 3
DENSITY_THRESHOLD  = 3.0     # matches per 100 chars
DENSITY_BONUS      = 0.05
ISOLATION_PENALTY  = 0.30

# (<=1 category, 2 categories, >=3 categories)
SINGLE_WORD_SCALE  = (0.50, 0.65, 0.80)
GENERIC_TERM_SCALE = (0.40, 0.60, 0.75)
LEGIT_SCALE        = 0.50
CRITICAL_SCALE     = 1.15
HIGH_CONF_SCALE    = 1.10

# ---------- URL recognizer ----------
URL_BASE_WEIGHT = 0.50
URL_WEIGHTS = {
    "ip_address":       0.90,
    "http_financial":   0.92,
    "url_shortener":    0.78,
    "suspicious_tld":   0.82,
    "suspicious_param": 0.75,
    "suspicious_path":  0.70,
    "plain_http":       0.60,
}
URL_DISPLAY_CHARS = 50

# ---------- Input ----------
MAX_MESSAGE_CHARS = 1000


@dataclass(frozen=True)
class ScoringConfig:
    k_factor: float = K_FACTOR
    max_score: float = MAX_SCORE
    min_score: float = MIN_SCORE


@dataclass(frozen=True)
class ContextConfig:
    base_boost: float = BASE_BOOST
    min_span_chars: int = MIN_SPAN_CHARS
    density_threshold: float = DENSITY_THRESHOLD
    density_bonus: float = DENSITY_BONUS
    isolation_penalty: float = ISOLATION_PENALTY
    single_word_scale: tuple = SINGLE_WORD_SCALE
    generic_term_scale: tuple = GENERIC_TERM_SCALE
    legit_scale: float = LEGIT_SCALE
    critical_scale: float = CRITICAL_SCALE
    high_conf_scale: float = HIGH_CONF_SCALE
