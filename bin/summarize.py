#!/usr/bin/env python3
import argparse
from pathlib import Path
import pandas as pd

LEVELS = ["CRITICAL", "HIGH", "MEDIUM", "LOW"]

def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Counts and rates per risk level, plus a TOTAL row."""
    if "_SCAN_RISK_LEVEL" not in df.columns:
        raise KeyError("Missing _SCAN_RISK_LEVEL in input. Run scan_messages.py first.")
    total = int(len(df))
    counts = df["_SCAN_RISK_LEVEL"].value_counts(dropna=False)

    def pct(n):
        return round((n / total * 100.0), 2) if total else 0.0

    rows = [{"risk_level": lvl, "count": int(counts.get(lvl, 0)), "percent": pct(int(counts.get(lvl, 0)))}
            for lvl in LEVELS]
    rows.append({"risk_level": "TOTAL", "count": total, "percent": 100.00 if total else 0.0})
    return pd.DataFrame(rows)

def write_markdown(summary_df: pd.DataFrame, path: Path, *, flagged: int, title="Scan Summary") -> None:
    total = int(summary_df.loc[summary_df["risk_level"] == "TOTAL", "count"].iloc[0])
    path.write_text(
        "\n".join([
            f"# {title}",
            "",
            f"- Total messages scanned: **{total:,}**",
            f"- Flagged (score > 0): **{flagged:,}**",
            "",
            "## Breakdown table",
            summary_df.to_markdown(index=False),
        ]),
        encoding="utf-8"
    )

def main():
    ap = argparse.ArgumentParser(description="Bucket scanned messages by risk level.")
    ap.add_argument("--in", dest="inp", required=True)
    ap.add_argument("--out-dir", required=True)
    args = ap.parse_args()

    out_dir = Path(args.out_dir); out_dir.mkdir(parents=True, exist_ok=True)
    df = pd.read_csv(args.inp)

    summary_df = summarize(df)
    flagged = int((df["_SCAN_SCORE"] > 0).sum()) if "_SCAN_SCORE" in df.columns else 0
    summary_df.to_csv(out_dir / "summary_risk.csv", index=False)
    write_markdown(summary_df, out_dir / "summary_risk.md", flagged=flagged)

    top = df.sort_values("_SCAN_SCORE", ascending=False).head(20) if "_SCAN_SCORE" in df.columns else df.head(0)
    top.to_csv(out_dir / "top_flagged.csv", index=False)

    print("\nSummary (risk):")
    print(summary_df.to_string(index=False))
    print(f"✅ Summary -> {out_dir/'summary_risk.csv'} | {out_dir/'summary_risk.md'}")

if __name__ == "__main__":
    main()
