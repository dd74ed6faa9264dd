#!/usr/bin/env python3
"""
Batch runner: prepare -> scan -> summarize over a CSV of messages.

Usage: python run.py --messages inbox.csv [--patterns patterns.csv] [--max-chars 1000] [--clean] [-v]
"""

import argparse
import logging
import shlex
import shutil
import subprocess
import sys
from pathlib import Path

BIN = Path(__file__).resolve().parent / "bin"

def run(cmd_list):
    """One pipeline step as a child process; CalledProcessError propagates."""
    shown = shlex.join(str(p) for p in cmd_list)
    logging.info("▶ %s", shown)
    proc = subprocess.run(cmd_list)
    if proc.returncode != 0:
        logging.error("Step exited with %s: %s", proc.returncode, shown)
        raise subprocess.CalledProcessError(proc.returncode, cmd_list)

def ensure_path_exists(p: Path, should_exist=True):
    if should_exist and not p.exists():
        raise FileNotFoundError(f"Required file not found: {p}")

def prepare_dirs(dirs, clean=False):
    for d in dirs:
        if clean and d.exists():
            logging.info("Cleaning directory: %s", d)
            shutil.rmtree(d)
        d.mkdir(parents=True, exist_ok=True)

def build_steps(py, messages: Path, work: Path, out: Path, patterns=None, max_chars=None):
    """Command lines for prepare -> scan -> summarize; each step reads the previous one's file."""
    prepped = work / "messages_prep.csv"
    scanned = work / "messages_scanned.csv"

    prep = [py, str(BIN / "prepare_messages.py"), "--in", str(messages), "--out", str(prepped)]
    if max_chars:
        prep += ["--max-chars", str(max_chars)]

    scan = [py, str(BIN / "scan_messages.py"), "--in", str(prepped), "--out", str(scanned)]
    if patterns:
        scan += ["--patterns", str(patterns)]

    summ = [py, str(BIN / "summarize.py"), "--in", str(scanned), "--out-dir", str(out)]
    return [prep, scan, summ]

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Scan a CSV of messages for scam indicators and summarize by risk level.")
    ap.add_argument("--messages", default="messages.csv", help="CSV with one message per row")
    ap.add_argument("--patterns", default=None, help="Pattern CSV/JSON; built-in table when omitted")
    ap.add_argument("--python", default=sys.executable, help="Interpreter used for the bin/ steps")
    ap.add_argument("--workdir", default="work", help="Intermediate CSVs")
    ap.add_argument("--outdir", default="out", help="Summary CSV/Markdown")
    ap.add_argument("--max-chars", type=int, default=None, help="Truncate messages before scanning")
    ap.add_argument("--clean", action="store_true", help="Wipe workdir/outdir first")
    ap.add_argument("--verbose", "-v", action="store_true")
    return ap.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(message)s")

    messages = Path(args.messages)
    patterns = Path(args.patterns) if args.patterns else None
    for p in filter(None, (messages, patterns)):
        logging.debug("Checking input %s", p)
        ensure_path_exists(p)

    work, out = Path(args.workdir), Path(args.outdir)
    prepare_dirs((work, out), clean=args.clean)

    try:
        for cmd in build_steps(args.python, messages, work, out, patterns, args.max_chars):
            run(cmd)
    except Exception as exc:
        logging.exception("Pipeline failed: %s", exc)
        sys.exit(2)

    logging.info("✅ Done! Summary at: %s", out / "summary_risk.md")

if __name__ == "__main__":
    main()
