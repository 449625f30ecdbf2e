#!/usr/bin/env python3
"""Synthetic rate guide files for import testing.

Writes a CSV or XLSX in the upload format (row 1 = template headers, rows 2+ =
entries) with realistic tenor bands and balanced ratio pairs. A share of rows
can be deliberately broken to exercise the validation preview.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from erp_toolkit.models.rate_guide import RateGuideField

TENORS = [30, 60, 90, 180, 270, 365]
AMOUNT_BANDS = [
    (1_000_000, 9_999_999.99),
    (10_000_000, 49_999_999.99),
    (50_000_000, 99_999_999.99),
    (100_000_000, 499_999_999.99),
]


def generate_rate_guides(rows: int, invalid_ratio: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Rows formatted the way staff type them ("12.00%", "50,000,000.00").

    Args:
        rows: number of entries
        invalid_ratio: share of rows whose ratio pair is unbalanced (0..1)
        seed: random seed for reproducible data
    """
    rng = np.random.default_rng(seed)

    tenor = rng.choice(TENORS, rows)
    band = rng.integers(0, len(AMOUNT_BANDS), rows)
    rate = np.round(rng.uniform(8.0, 18.0, rows), 2)
    spread = np.round(rng.uniform(2.0, 8.0, rows), 2)
    ethica = np.round(rng.uniform(20.0, 50.0, rows), 2)
    at_ethica = np.round(rng.uniform(50.0, 90.0, rows), 2)
    customer = np.round(100 - ethica, 2)
    broken = rng.random(rows) < invalid_ratio
    customer[broken] = np.round(customer[broken] - 1.5, 2)

    def pct(v: float) -> str:
        return f"{v:.2f}%"

    records = []
    for i in range(rows):
        lo, hi = AMOUNT_BANDS[band[i]]
        records.append([
            int(tenor[i]),
            pct(rate[i]),
            pct(spread[i]),
            pct(ethica[i]),
            pct(customer[i]),
            pct(at_ethica[i]),
            pct(round(100 - at_ethica[i], 2)),
            f"{lo:,.2f}",
            f"{hi:,.2f}",
        ])
    return pd.DataFrame(records, columns=[f.label for f in RateGuideField])


def write_dataset(output: Path, df: pd.DataFrame) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".csv":
        df.to_csv(output, index=False, lineterminator="\n")
    else:
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Rate Guide", index=False)
    print(f"Created rate guide file: {output}")
    print(f"  Rows: {len(df):,} (+ 1 header row)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic rate guide upload files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s rates.xlsx --rows 200
  %(prog)s broken.csv --rows 50 --invalid-ratio 0.2
        """,
    )
    parser.add_argument("output", type=Path, help="Output .xlsx or .csv path")
    parser.add_argument("--rows", type=int, default=100, help="Number of entries (default: 100)")
    parser.add_argument(
        "--invalid-ratio", type=float, default=0.0, help="Share of rows with an unbalanced ratio pair"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.invalid_ratio <= 1.0:
        print("Error: --invalid-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    write_dataset(args.output, generate_rate_guides(args.rows, args.invalid_ratio, args.seed))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
