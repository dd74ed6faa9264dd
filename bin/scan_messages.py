#!/usr/bin/env python3
# scan_messages.py
import argparse
import logging
from typing import List, Optional

import pandas as pd

from scamsentry.model import Category
from scamsentry.normalize import (
    as_text, ensure_unique_columns, load_csv_any, normalize_headers, pick_col, write_any,
)
from scamsentry.patterns import load_patterns
from scamsentry.pipeline import ScanPipeline, analyze, explain
from scamsentry.url_dfa import TRUSTED_DOMAINS, UrlRecognizer

FLAG_COLS = ["_SCAN_HAS_MATCH", "_SCAN_HAS_URL", "_SCAN_MATCH_COUNT"]
TEXT_COLS = ["_SCAN_CATEGORIES", "_SCAN_PATTERNS", "_SCAN_URLS"]

def scan_row(pipeline: ScanPipeline, raw: str) -> dict:
    res = pipeline.scan(raw)
    a = analyze(res, raw)
    pats = [m.pattern for m in res.matches if m.category is not Category.URL and m.weight > 0]
    urls = [m.pattern for m in res.matches if m.category is Category.URL]
    return {
        "_SCAN_SCORE": res.score,
        "_SCAN_RISK_LEVEL": a.risk_level,
        "_SCAN_CONFIDENCE": a.confidence,
        "_SCAN_HAS_MATCH": bool(res.matches),
        "_SCAN_HAS_URL": bool(urls),
        "_SCAN_MATCH_COUNT": len(res.matches),
        "_SCAN_CATEGORIES": "|".join(c.name for c in a.categories),
        "_SCAN_PATTERNS": "|".join(dict.fromkeys(p.lower() for p in pats)),
        "_SCAN_URLS": "|".join(dict.fromkeys(urls)),
    }

def add_scan_features(df: pd.DataFrame, pipeline: ScanPipeline, text_candidates: List[str]) -> pd.DataFrame:
    df = ensure_unique_columns(normalize_headers(df))
    text_col = next((c for c in text_candidates if c in df.columns), None)
    if not text_col:
        text_col = pick_col(df, text_candidates, must=False)
    if not text_col:
        raise KeyError("scan_messages: no message column found.")

    rows = []
    for idx, row in df.iterrows():
        rec = scan_row(pipeline, as_text(row[text_col]))
        rec["_row_id"] = idx
        rows.append(rec)

    out = df.copy()
    if not rows:
        for c in ["_SCAN_SCORE", "_SCAN_RISK_LEVEL", "_SCAN_CONFIDENCE"] + FLAG_COLS + TEXT_COLS:
            out[c] = pd.Series(dtype=object)
        return out
    feat = pd.DataFrame(rows).set_index("_row_id")
    out.index.name = "_row_id"
    out = out.join(feat, how="left").reset_index(drop=True)
    out[FLAG_COLS] = out[FLAG_COLS].fillna(0).astype(int)
    for c in TEXT_COLS:
        out[c] = out[c].fillna("")
    return out

def build(patterns_path: Optional[str], trust_official: bool = False) -> ScanPipeline:
    table = load_patterns(patterns_path) if patterns_path else None
    urls = UrlRecognizer(trusted_domains=TRUSTED_DOMAINS if trust_official else ())
    return ScanPipeline.from_patterns(table, url_recognizer=urls)

def main():
    ap = argparse.ArgumentParser(description="Scan messages for scam indicators and add _SCAN_* columns.")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--in", dest="inp", help="CSV of messages (e.g. from prepare_messages.py)")
    src.add_argument("--text", help="Scan a single message and print the explanation")
    ap.add_argument("--out", help="Output CSV/parquet (required with --in)")
    ap.add_argument("--patterns", default=None, help="Pattern CSV/JSON; defaults to the built-in table")
    ap.add_argument("--text-candidates", nargs="*", default=["_MESSAGE", "MESSAGE", "TEXT", "BODY", "SMS"])
    ap.add_argument("--trust-official-domains", action="store_true",
                    help="Ignore links to known bank, e-wallet, government and telco sites")
    ap.add_argument("--verbose", "-v", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(message)s")
    pipeline = build(args.patterns, args.trust_official_domains)

    if args.text is not None:
        res = pipeline.scan(args.text)
        print(explain(res, args.text))
        for m in res.matches:
            print(f"  [{m.category.name}] {m.pattern!r} w={m.weight:.2f} @{m.start}-{m.end}")
        return

    if not args.out:
        ap.error("--out is required with --in")
    df = load_csv_any(args.inp)
    out = add_scan_features(df, pipeline, [c.upper() for c in args.text_candidates])

    write_any(out, args.out)
    flagged = int((out["_SCAN_SCORE"] > 0).sum()) if len(out) else 0
    print(f"✅ Scan features added -> {args.out}  (rows={len(out):,}, flagged={flagged:,})")

if __name__ == "__main__":
    main()
