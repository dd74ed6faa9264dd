#!/usr/bin/env python3
import argparse
from pathlib import Path
import pandas as pd

from scamsentry.config import MAX_MESSAGE_CHARS
from scamsentry.normalize import (
    normalize_headers, ensure_unique_columns, pick_col, normalize_message, load_csv_any, write_any
)

TEXT_CANDIDATES = ["MESSAGE", "TEXT", "BODY", "SMS", "CONTENT", "MESSAGE_TEXT"]

def prepare(df: pd.DataFrame, text_candidates=TEXT_CANDIDATES, max_chars: int = MAX_MESSAGE_CHARS) -> pd.DataFrame:
    """Canonical headers, one `_MESSAGE` column (clean, capped), empty rows dropped."""
    df = ensure_unique_columns(normalize_headers(df))
    text_col = pick_col(df, list(text_candidates), must=True, label="message text")
    df["_MESSAGE"] = df[text_col].map(lambda t: normalize_message(t, max_chars=max_chars))
    df["_TRUNCATED"] = df[text_col].map(lambda t: int(len(str(t)) > max_chars) if isinstance(t, str) else 0)
    return df[df["_MESSAGE"].str.len() > 0].reset_index(drop=True)

def main():
    ap = argparse.ArgumentParser(description="Normalize a CSV of messages for scanning.")
    ap.add_argument("--in", dest="inp", required=True)
    ap.add_argument("--out", required=True)
    ap.add_argument("--encoding", default="utf-8")
    ap.add_argument("--max-chars", type=int, default=MAX_MESSAGE_CHARS)
    ap.add_argument("--text-candidates", nargs="+", default=TEXT_CANDIDATES)
    args = ap.parse_args()

    df = load_csv_any(Path(args.inp), encoding=args.encoding)
    out = prepare(df, args.text_candidates, args.max_chars)

    write_any(out, args.out)
    print(f"✅ Messages prepared -> {args.out} | rows={len(out):,} (dropped {len(df) - len(out):,} empty)")

if __name__ == "__main__":
    main()
