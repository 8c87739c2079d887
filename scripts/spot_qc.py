#!/usr/bin/env python3
"""CLI entrypoint for the spot-level QC pipeline."""

from __future__ import annotations

from spotqc.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
