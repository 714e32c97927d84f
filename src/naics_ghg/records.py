# loading and normalizing the emission-factor and NAICS label tables
import logging
import re
from pathlib import Path
from typing import Dict, Mapping, Optional

import pandas as pd

# canonical names used across the app
NAICS_COL = "naics"
SECTOR_COL = "sector"
SUBSECTOR_COL = "subsector"
IND_GROUP_COL = "ind_group"
INDUSTRY_COL = "industry"
TITLE_COL = "title"
GHG_COL = "ghg"
UNIT_COL = "unit"
BASE_COL = "base"
MARGINS_COL = "margins"
TOTAL_COL = "total"
USEEIO_COL = "useeio"

# hierarchy columns in nesting order; depth d (1..5) selects HIERARCHY_COLUMNS[d - 1]
HIERARCHY_COLUMNS = [SECTOR_COL, SUBSECTOR_COL, IND_GROUP_COL, INDUSTRY_COL, NAICS_COL]
NUMERIC_COLUMNS = [BASE_COL, MARGINS_COL, TOTAL_COL]
TEXT_COLUMNS = [TITLE_COL, GHG_COL, UNIT_COL, USEEIO_COL]
RECORD_COLUMNS = [NAICS_COL] + HIERARCHY_COLUMNS[:-1] + TEXT_COLUMNS + NUMERIC_COLUMNS

CODE_WIDTH = 6
ROOT_LABEL = "All industries"

# 2017 NAICS titles carry a trailing "T" marking trilateral agreement
_TRILATERAL = re.compile(r"(?<=[a-z)])T$")
_RANGE_CODE = re.compile(r"^(\d{2})-(\d{2})$")


class ParseError(ValueError):
    """A source table could not be coerced into typed records."""


def pad_code(code: str) -> str:
    """Right-pad a NAICS prefix with zeros to the full 6 digits."""
    return str(code).strip().ljust(CODE_WIDTH, "0")


def column_for_depth(depth: int) -> Optional[str]:
    if depth <= 0:
        return None
    return HIERARCHY_COLUMNS[min(depth, len(HIERARCHY_COLUMNS)) - 1]


def _to_float(raw: pd.Series, column: str) -> pd.Series:
    # thousands separators are allowed, anything else non-numeric is not
    cleaned = raw.fillna("").astype(str).str.strip().str.replace(",", "", regex=False)
    values = pd.to_numeric(cleaned, errors="coerce")
    bad = values.isna()
    if bad.any():
        row = bad.idxmax()
        raise ParseError(f"column {column!r}: non-numeric value {raw.loc[row]!r} at row {row}")
    return values.astype("float64")


def parse_emissions(raw: pd.DataFrame, column_map: Mapping[str, str]) -> pd.DataFrame:
    """
    Turn a raw emissions table (all cells as read from CSV) into the record set.

    `column_map` maps each canonical field (naics, title, ghg, unit, base,
    margins, total, useeio) to the source column name. Hierarchy keys are
    derived from the 6-digit code by truncating to 2/3/4/5 digits and padding
    back to 6 with zeros.

    Raises ParseError on a missing column or a non-numeric emission value.
    """
    missing = [field for field, source in column_map.items() if source not in raw.columns]
    if missing:
        raise ParseError(f"missing required columns: {', '.join(column_map[f] for f in missing)}")

    df = pd.DataFrame(index=raw.index)
    codes = raw[column_map[NAICS_COL]].fillna("").astype(str).str.strip()
    invalid = ~codes.str.fullmatch(r"\d{1,6}")
    if invalid.any():
        row = invalid.idxmax()
        raise ParseError(f"column {column_map[NAICS_COL]!r}: invalid NAICS code {codes.loc[row]!r} at row {row}")
    df[NAICS_COL] = codes.str.ljust(CODE_WIDTH, "0")
    for width, col in zip(range(2, CODE_WIDTH), HIERARCHY_COLUMNS[:-1]):
        df[col] = df[NAICS_COL].str[:width].str.ljust(CODE_WIDTH, "0")

    for col in TEXT_COLUMNS:
        df[col] = raw[column_map[col]].fillna("").astype(str).str.strip()
    for col in NUMERIC_COLUMNS:
        df[col] = _to_float(raw[column_map[col]], column_map[col])

    return df[RECORD_COLUMNS].reset_index(drop=True)


def _clean_title(title: str) -> str:
    return _TRILATERAL.sub("", str(title).strip()).strip()


def parse_labels(raw: pd.DataFrame, column_map: Mapping[str, str]) -> Dict[str, str]:
    """Build the zero-padded code -> title table. Range codes like 31-33 cover each sector they span."""
    code_col, title_col = column_map[NAICS_COL], column_map[TITLE_COL]
    if code_col not in raw.columns or title_col not in raw.columns:
        raise ParseError(f"missing required columns: {code_col}, {title_col}")

    labels: Dict[str, str] = {}
    for code, title in zip(raw[code_col], raw[title_col]):
        if pd.isna(code) or pd.isna(title):
            continue
        code = str(code).strip()
        # codes read back from a numeric column come as "11.0"
        if code.endswith(".0"):
            code = code[:-2]
        match = _RANGE_CODE.match(code)
        if match:
            for sector in range(int(match.group(1)), int(match.group(2)) + 1):
                labels[pad_code(str(sector))] = _clean_title(title)
        elif code.isdigit() and len(code) <= CODE_WIDTH:
            labels[pad_code(code)] = _clean_title(title)
    return labels


def label_for(labels: Optional[Mapping[str, str]], code: str) -> str:
    if not code:
        return ROOT_LABEL
    if labels:
        return labels.get(code, code)
    return code


def _read_table(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""], skip_blank_lines=True)


def load_emissions(path, column_map: Mapping[str, str]) -> Optional[pd.DataFrame]:
    """Read and parse one emissions table. Returns None (dataset not loaded) on failure."""
    try:
        raw = _read_table(Path(path))
        records = parse_emissions(raw, column_map)
        logging.info("load_emissions: %d records from %s", len(records), path)
        return records
    except FileNotFoundError:
        logging.warning("load_emissions: file not found: %s", path)
        return None
    except PermissionError:
        logging.warning("load_emissions: permission denied: %s", path)
        return None
    except ParseError as e:
        logging.warning("load_emissions: %s: %s", path, e)
        return None
    except Exception:
        logging.exception("load_emissions: failed to read/parse file: %s", path)
        return None


def load_labels(path, column_map: Mapping[str, str]) -> Optional[Dict[str, str]]:
    try:
        raw = _read_table(Path(path))
        labels = parse_labels(raw, column_map)
        logging.info("load_labels: %d labels from %s", len(labels), path)
        return labels
    except FileNotFoundError:
        logging.warning("load_labels: file not found: %s", path)
        return None
    except PermissionError:
        logging.warning("load_labels: permission denied: %s", path)
        return None
    except ParseError as e:
        logging.warning("load_labels: %s: %s", path, e)
        return None
    except Exception:
        logging.exception("load_labels: failed to read/parse file: %s", path)
        return None
