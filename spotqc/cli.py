"""Command-line interface for spotqc runs."""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Iterable

from spotqc.config import AnalysisConfig


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Spot-level gene/UMI QC across spatial transcriptomics samples."
    )
    parser.add_argument(
        "--config", required=True, help="Path to JSON config for the run."
    )
    parser.add_argument(
        "--data-dir", default=None, help="Override the config's input directory."
    )
    parser.add_argument(
        "--outdir", default=None, help="Override the config's output directory."
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)
    config = AnalysisConfig.from_file(args.config)
    overrides = {}
    if args.data_dir is not None:
        overrides["data_dir"] = str(args.data_dir)
    if args.outdir is not None:
        overrides["outdir"] = str(args.outdir)
    if overrides:
        config = replace(config, **overrides)

    from spotqc.pipeline.run import run_analysis

    run_analysis(config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
