from __future__ import annotations
import io
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, Field

from .constants import ALIAS_LOOKUP, DEFAULT_PAYMENT_STATUS, IMPORT_FIELDS, normalize_header
from .models import generate_access_code

logger = logging.getLogger(__name__)

ImportRow = Dict[str, str]

class ImportDecodeError(ValueError):
    """The upload is not a readable workbook, or has no data rows."""

def _cell(v: Any) -> Any:
    # pandas marks empty cells as NaN/NaT
    if v is None:
        return None
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        pass
    return v

def _cell_text(v: Any) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return str(v)

def _is_blank(row: List[Any]) -> bool:
    return all(c is None or c == "" for c in row)

# -----------------------
# Decode
# -----------------------
def decode_workbook(file, filename: Optional[str] = None) -> Tuple[List[str], List[List[Any]]]:
    """
    Read the first sheet of an uploaded workbook (bytes or file-like).
    Returns (headers, rows); the first row is the header row.
    """
    name = (filename or "").lower()
    if name.endswith(".xls"):
        raise ImportDecodeError("El formato .xls no es compatible. Guarda el archivo como .xlsx o .csv.")
    buf = io.BytesIO(file) if isinstance(file, (bytes, bytearray)) else file
    try:
        if name.endswith(".csv"):
            df = pd.read_csv(buf, header=None, dtype=object, skip_blank_lines=False)
        else:
            df = pd.read_excel(buf, sheet_name=0, header=None, dtype=object)
    except Exception as exc:
        raise ImportDecodeError("Error al leer el archivo. Asegúrate de que sea un .xlsx válido.") from exc

    grid = [[_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
    if len(grid) < 2:
        raise ImportDecodeError("El archivo no contiene datos suficientes.")

    headers = ["" if h is None else _cell_text(h).strip() for h in grid[0]]
    return headers, grid[1:]

# -----------------------
# Header mapping
# -----------------------
def auto_map_headers(headers: Iterable[str]) -> Dict[str, Optional[str]]:
    """
    Map raw header -> canonical field via the alias table.
    Case-insensitive, trimmed; unknown headers map to None.
    """
    return {h: ALIAS_LOOKUP.get(normalize_header(h)) for h in headers}

# -----------------------
# Rows
# -----------------------
def extract_rows(headers: List[str], rows: List[List[Any]],
                 mapping: Dict[str, Optional[str]]) -> List[ImportRow]:
    out: List[ImportRow] = []
    for row in rows:
        cells = [_cell(c) for c in row]
        if _is_blank(cells):
            continue
        rec: ImportRow = {}
        for i, h in enumerate(headers):
            field = mapping.get(h)
            if not field:
                continue
            value = cells[i] if i < len(cells) else None
            if value is None:
                continue
            rec[field] = _cell_text(value).strip()
        out.append(rec)
    return out

def validate_rows(records: List[ImportRow]) -> List[ImportRow]:
    # name is the only mandatory field
    return [r for r in records if (r.get("name") or "").strip()]

def hydrate_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Fill the defaults a stored athlete needs but the sheet rarely carries."""
    out = dict(record)
    if not out.get("payment_status"):
        out["payment_status"] = DEFAULT_PAYMENT_STATUS
    if not out.get("access_code"):
        out["access_code"] = generate_access_code()
    return out

# -----------------------
# Session (preview / remap)
# -----------------------
class ImportSession(BaseModel):
    headers: List[str]
    rows: List[List[Any]] = Field(default_factory=list)
    mapping: Dict[str, Optional[str]] = Field(default_factory=dict)

    def remap(self, header: str, field: Optional[str]):
        if header not in self.headers:
            raise KeyError(f"Unknown column: {header}")
        if field and field not in IMPORT_FIELDS:
            raise ValueError(f"Unknown field: {field}")
        self.mapping[header] = field or None

    @property
    def extracted(self) -> List[ImportRow]:
        return extract_rows(self.headers, self.rows, self.mapping)

    @property
    def records(self) -> List[ImportRow]:
        return validate_rows(self.extracted)

    @property
    def dropped_count(self) -> int:
        return len(self.extracted) - len(self.records)

    def preview(self, n: int = 8) -> List[ImportRow]:
        return self.records[:n]

    def mapped_fields(self) -> Dict[str, str]:
        return {h: f for h, f in self.mapping.items() if f}

def build_session(headers: List[str], rows: List[List[Any]]) -> ImportSession:
    session = ImportSession(headers=list(headers), rows=[list(r) for r in rows],
                            mapping=auto_map_headers(headers))
    unmapped = [h for h, f in session.mapping.items() if not f]
    if unmapped:
        logger.info("Import columns left unmapped: %s", ", ".join(unmapped))
    if session.dropped_count:
        logger.info("Import: %d row(s) without a name will be skipped.", session.dropped_count)
    return session

def load_import(file, filename: Optional[str] = None) -> ImportSession:
    headers, rows = decode_workbook(file, filename)
    return build_session(headers, rows)
