#!/usr/bin/env python3
"""
Utilisation Report Builder
Derives the per-person utilisation and net earnings table from the roster dataset
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from month_resolver import resolve_months
from row_builder import build_rows, get_columns
from utils import TableCache, get_table_cache, previous_month_iso

SOURCE_DATA_PATH = Path(__file__).resolve().parent / 'source_data.json'

# Parsed datasets by resolved path; each file is read once per process
_SOURCE_DATA: Dict[Path, List[Any]] = {}


def load_source_data(path=None) -> List[Any]:
    """
    Load a roster dataset (a JSON list of entries).

    Args:
        path: JSON file to read (default: the bundled dataset)

    Returns:
        List of parsed entries; repeated calls for the same file return the same list

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not hold a JSON list
    """
    source_path = Path(path or SOURCE_DATA_PATH).resolve()
    if source_path in _SOURCE_DATA:
        return _SOURCE_DATA[source_path]

    if not source_path.exists():
        raise FileNotFoundError(f"Source data file not found: {source_path}")

    with open(source_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Source data must be a JSON list of entries: {source_path}")

    logging.info(f"Loaded {len(data)} roster entries from {source_path}")
    _SOURCE_DATA[source_path] = data
    return data


class UtilisationReportBuilder:
    def __init__(self, source_path=None, cache: Optional[TableCache] = None):
        """
        Initialize the utilisation report builder

        Args:
            source_path: Roster JSON file (default: bundled source_data.json)
            cache: Table cache to memoize against (default: the process-wide cache)
        """
        self.source_path = Path(source_path) if source_path else SOURCE_DATA_PATH
        self.cache = cache if cache is not None else get_table_cache()

    def load_source_data(self) -> List[Any]:
        """Load the configured roster dataset"""
        return load_source_data(self.source_path)

    def build_table(self, records: Optional[List[Any]] = None,
                    now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Derive the report table, reusing the previous result for the same dataset object.

        Args:
            records: Parsed roster entries (default: the configured dataset)
            now: Reference time for fallback months and previous-month earnings

        Returns:
            dict with 'months', 'columns', 'rows' (tuple of DisplayRow) and 'prev_month'
        """
        if records is None:
            records = self.load_source_data()

        def derive(data):
            months = resolve_months(data, now)
            return {
                'months': months,
                'columns': get_columns(months),
                'rows': tuple(build_rows(data, months, now)),
                'prev_month': previous_month_iso(now),
            }

        return self.cache.get_or_build(records, derive)

    def to_dataframe(self, table: Dict[str, Any], rename_headers: bool = False) -> pd.DataFrame:
        """
        Convert a derived table into a DataFrame.

        Args:
            table: Result of build_table()
            rename_headers: Use the column headers instead of the column keys

        Returns:
            pd.DataFrame with one row per active person, columns in display order
        """
        keys = [col['key'] for col in table['columns']]
        df = pd.DataFrame([row.as_dict() for row in table['rows']], columns=keys)

        if rename_headers:
            df = df.rename(columns={col['key']: col['header'] for col in table['columns']})
        return df

    def export_table(self, table: Dict[str, Any], output_path) -> Path:
        """
        Write the table to CSV or Excel, with column headers as the header row.

        Raises:
            ValueError: If the file extension is neither .csv nor .xlsx
        """
        output_path = Path(output_path)
        suffix = output_path.suffix.lower()
        if suffix not in {'.csv', '.xlsx'}:
            raise ValueError(f"Export file must be CSV or Excel format: {output_path}")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_dataframe(table, rename_headers=True)
        if suffix == '.csv':
            df.to_csv(output_path, index=False, encoding='utf-8')
        else:
            df.to_excel(output_path, index=False)

        logging.info(f"Exported {len(df)} rows to {output_path}")
        return output_path

    def generate_text_summary(self, table: Dict[str, Any], output_dir,
                              month_str: Optional[str] = None) -> Path:
        """Generate a text file listing each active person's utilisation"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        if not month_str:
            month_str = pd.Period(table['prev_month'], freq='M').strftime('%B_%Y')
        output_path = output_dir / f"utilisation_summary_{month_str}.txt"

        columns = table['columns']
        rows = table['rows']
        widths = [max([len(col['header'])] + [len(row.as_dict()[col['key']]) for row in rows])
                  for col in columns]

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(f"UTILISATION SUMMARY - {month_str.replace('_', ' ').upper()} REPORT\n")
            f.write("=" * 40 + "\n\n")
            f.write(f"ACTIVE PEOPLE: {len(rows)}\n")
            f.write(f"REPORT MONTHS: {', '.join(table['months'])}\n\n")

            f.write("  ".join(col['header'].ljust(w) for col, w in zip(columns, widths)).rstrip() + "\n")
            f.write("-" * (sum(widths) + 2 * (len(widths) - 1)) + "\n")
            for row in rows:
                values = row.as_dict()
                f.write("  ".join(values[col['key']].ljust(w) for col, w in zip(columns, widths)).rstrip() + "\n")
            f.write("\n")

            f.write("Notes:\n")
            f.write(f"- {table['columns'][-1]['header']} is for {table['prev_month']}\n")
            f.write("- Employee potential earnings count positive, external costs negative\n")
            f.write("- – indicates no data\n")

        logging.info(f"Text summary generated: {output_path}")
        return output_path
