#!/usr/bin/env python3
import argparse

from portfolio.orchestrator import run_once


def main():
    parser = argparse.ArgumentParser(description="Portfolio merge / ordering / intake review CLI")
    parser.add_argument("--config", required=True, help="Path to YAML config")
    parser.add_argument("--type", dest="portfolio_type", choices=["artist", "team"], help="Intake payload type (default: inferred)")
    parser.add_argument("--intake", dest="intake", help="AI-extracted intake JSON to scan for flagged fields")
    parser.add_argument("--members", dest="members", help="Member contributions JSON to merge into a team view")
    parser.add_argument("--mode", dest="mode", choices=["curated", "chronological"], help="Sort mode for every section")
    parser.add_argument("--out-dir", dest="out_dir", help="Output directory")
    args = parser.parse_args()

    overrides = {
        "portfolio_type": args.portfolio_type,
        "intake": args.intake,
        "members": args.members,
        "mode": args.mode,
        "out_dir": args.out_dir,
    }

    for path in run_once(args.config, overrides=overrides):
        print(path)


if __name__ == "__main__":
    main()
