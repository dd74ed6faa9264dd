# patterns.py
"""
Default keyword table and pattern-file loading.

Weights are in [0, 1]. Single generic words carry low weights on purpose; the
context rules shrink them further when nothing else in the message backs them.
URL-shaped indicators are not listed here, the URL recognizer handles them.
"""
import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .model import Category, InvalidPattern, Pattern
from .normalize import ensure_unique_columns, load_csv_any, normalize_headers, pick_col

logger = logging.getLogger(__name__)

PatternTable = Dict[Category, List[Pattern]]

_DEFAULT: Dict[str, List[tuple]] = {
    "URGENCY": [
        ("account will be suspended", 0.85), ("expires within 24 hours", 0.83),
        ("limited time offer", 0.78), ("expire today", 0.80),
        ("urgent security alert", 0.85), ("immediate action required", 0.82),
        ("final warning", 0.80),
        ("suspended", 0.72), ("expires", 0.68), ("act now", 0.70), ("urgent", 0.70),
        ("last chance", 0.75), ("expiring soon", 0.73), ("claim now", 0.72),
        ("register now", 0.68),
        ("immediate", 0.60), ("now na", 0.62), ("asap", 0.58), ("hurry", 0.62),
        ("expire", 0.60), ("avail", 0.55), ("i-click", 0.58), ("agad", 0.58),
        ("mabilis", 0.55),
    ],
    "FINANCIAL": [
        ("instant pera", 0.82), ("instant money", 0.82), ("mabilis na yaman", 0.83),
        ("kumita ng malaki", 0.80), ("guaranteed profit", 0.80),
        ("you are the winner", 0.85), ("claim your prize", 0.78), ("free money", 0.75),
        ("instant loan", 0.75), ("quick loan", 0.75), ("cash loan", 0.73),
        ("you won", 0.72), ("pautang", 0.70), ("prize", 0.68), ("reward", 0.68),
        ("winner", 0.72), ("claim", 0.65), ("payout", 0.70), ("free load", 0.72),
        ("dagdag kita", 0.70),
        ("loan", 0.60), ("congratulations", 0.62), ("investment", 0.58),
        ("profit", 0.60), ("win", 0.52), ("income", 0.52), ("extra income", 0.65),
        ("kumita", 0.62), ("earn", 0.50), ("pera", 0.58), ("cash", 0.50),
        ("money", 0.48), ("libre", 0.58),
    ],
    "PHISHING": [
        ("enter your otp", 0.90), ("send your otp", 0.88),
        ("verify your identity", 0.88), ("confirm your identity", 0.88),
        ("urgent security alert", 0.90), ("suspicious activity detected", 0.87),
        ("unusual activity detected", 0.85),
        ("verify your account", 0.83), ("suspended account", 0.82),
        ("account suspended", 0.82), ("locked account", 0.80), ("account locked", 0.80),
        ("complete verification", 0.82), ("security alert", 0.80),
        ("verification code", 0.78), ("security code", 0.77),
        ("verify account", 0.72), ("update your account", 0.73),
        ("confirm your account", 0.73), ("enter otp", 0.70), ("otp code", 0.68),
        ("failed transaction", 0.70), ("payment failed", 0.70), ("i-verify", 0.72),
        ("kailangan i-verify", 0.75),
        ("verify", 0.58), ("validate", 0.60), ("otp", 0.62), ("blocked", 0.58),
        ("restricted", 0.58), ("update", 0.50), ("confirm", 0.52),
    ],
    "IMPERSONATION": [
        ("gcash official", 0.88), ("from gcash", 0.85), ("bsp notification", 0.85),
        ("from your bank", 0.82), ("bank alert", 0.80), ("security team from", 0.82),
        ("bpi bank", 0.75), ("bdo bank", 0.75), ("bangko sentral", 0.78),
        ("government agency", 0.72), ("authorized representative", 0.70),
        ("gcash", 0.62), ("paymaya", 0.60), ("bsp", 0.65), ("bir", 0.65),
        ("bpi", 0.55), ("bdo", 0.55), ("metrobank", 0.58), ("unionbank", 0.55),
        ("landbank", 0.55), ("grabpay", 0.60), ("coins.ph", 0.60), ("sss", 0.60),
        ("philhealth", 0.60), ("pag-ibig", 0.60),
        ("smart", 0.48), ("globe", 0.48), ("pldt", 0.50), ("government", 0.52),
        ("customer service", 0.50), ("support team", 0.50), ("official", 0.45),
        ("authorized", 0.48),
    ],
    "LEGIT": [
        ("reference no", 0.30), ("ref no", 0.30), ("transaction id", 0.30),
        ("reply stop", 0.30), ("to unsubscribe", 0.30), ("order confirmed", 0.30),
        ("thank you for your payment", 0.30), ("never share your otp", 0.30),
        ("do not share your otp", 0.30),
    ],
}


def build_table(rows: Mapping) -> PatternTable:
    """{category-ish: [(keyword, weight) | Pattern | {"keyword","weight"}]} -> validated table."""
    table: PatternTable = defaultdict(list)
    for cat, items in rows.items():
        category = Category.parse(cat)
        for item in items:
            if isinstance(item, Pattern):
                table[category].append(item)
            elif isinstance(item, Mapping):
                if "keyword" not in item:
                    raise InvalidPattern(f"{category.name}: entry without keyword: {item!r}")
                table[category].append(Pattern(item["keyword"], item.get("weight")))
            else:
                table[category].append(Pattern(*item))
    return dict(table)


def default_patterns() -> PatternTable:
    return build_table(_DEFAULT)


def _from_json(path: Path) -> PatternTable:
    doc = json.loads(path.read_text(encoding="utf-8"))
    cats = doc.get("categories", doc) if isinstance(doc, dict) else None
    if not isinstance(cats, dict):
        raise InvalidPattern(f"{path}: expected an object of categories")
    rows = {}
    for name, body in cats.items():
        rows[name] = body.get("patterns", []) if isinstance(body, dict) else body
    return build_table(rows)


def _from_csv(path: Path, encoding: Optional[str]=None) -> PatternTable:
    df = ensure_unique_columns(normalize_headers(load_csv_any(path, encoding=encoding)))
    cat_col = pick_col(df, ["CATEGORY", "CAT", "GROUP"], must=True, label="pattern category")
    kw_col  = pick_col(df, ["KEYWORD", "PATTERN", "PHRASE", "TERM"], must=True, label="pattern keyword")
    w_col   = pick_col(df, ["WEIGHT", "SCORE", "W"], must=True, label="pattern weight")
    rows = defaultdict(list)
    for _, r in df.iterrows():
        rows[r[cat_col]].append((r[kw_col], _to_float(r[w_col])))
    return build_table(rows)


def _to_float(v):
    try:
        return float(v)
    except (TypeError, ValueError):
        return v          # Pattern reports it as InvalidWeight


def load_patterns(path: Union[str, Path], *, encoding: Optional[str]=None) -> PatternTable:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Pattern file not found: {p}")
    table = _from_json(p) if p.suffix.lower() == ".json" else _from_csv(p, encoding=encoding)
    logger.info("Loaded %d patterns in %d categories from %s",
                sum(len(v) for v in table.values()), len(table), p)
    return table
