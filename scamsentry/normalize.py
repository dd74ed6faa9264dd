# normalize.py
"""Table and message-text helpers shared by the pattern loader and the batch scripts."""
import re
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from .config import MAX_MESSAGE_CHARS

HEADER_JUNK_PAT = re.compile(r"[^\w\s]")
WHITESPACE_PAT  = re.compile(r"\s+")
CONTROL_PAT     = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

PathLike = Union[str, Path]


def canon_header(name) -> str:
    """'Message Text!' -> 'MESSAGE_TEXT'."""
    return WHITESPACE_PAT.sub("_", HEADER_JUNK_PAT.sub("", str(name)).strip()).upper()


# ---------- IO ----------
def load_csv_any(path: PathLike, *, delimiter: Optional[str]=None, encoding: Optional[str]=None) -> pd.DataFrame:
    """Every cell as str, blanks stay ''. Delimiter is sniffed from the header when not given."""
    return pd.read_csv(Path(path), sep=delimiter, engine="python", encoding=encoding or "utf-8",
                       dtype=str, keep_default_na=False)

def write_any(df: pd.DataFrame, path: PathLike) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix.lower() == ".parquet":
        df.to_parquet(p, index=False)   # needs pyarrow
    else:
        df.to_csv(p, index=False)
    return p


# ---------- Headers ----------
def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    return df.rename(columns=canon_header)

def ensure_unique_columns(df: pd.DataFrame) -> pd.DataFrame:
    """MESSAGE, MESSAGE -> MESSAGE, MESSAGE_1."""
    counts = {}
    cols = []
    for col in df.columns:
        k = counts.get(col, 0)
        cols.append(col if k == 0 else f"{col}_{k}")
        counts[col] = k + 1
    out = df.copy()
    out.columns = cols
    return out

def pick_col(df: pd.DataFrame, candidates: Iterable[str], *, must=False, label=""):
    """First column matching one of the aliases, compared in canonical form."""
    by_canon = {}
    for col in df.columns:
        by_canon.setdefault(canon_header(col), col)
    candidates = list(candidates)
    hit = next((by_canon[canon_header(c)] for c in candidates if canon_header(c) in by_canon), None)
    if hit is None and must:
        raise KeyError(f"Missing required column for {label or 'input'}: tried {candidates}")
    return hit


# ---------- Text ----------
def as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value)

def normalize_message(text, *, max_chars: int = MAX_MESSAGE_CHARS) -> str:
    """Control chars out, whitespace collapsed, capped at `max_chars`. Case is kept."""
    text = WHITESPACE_PAT.sub(" ", CONTROL_PAT.sub(" ", as_text(text))).strip()
    return text[:max_chars] if max_chars else text
