# backend/utils/export.py
# Serializers for the download buttons. They take already-built rows, format
# dates for humans and never compute anything themselves.
import json
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from config import settings
from utils.dates import as_utc, resolve_timezone

CSV_SEPARATOR = ";"
# Byte order mark so spreadsheet apps detect UTF-8 (accented product names)
CSV_BOM = "\ufeff"
DATE_FORMAT = "%d/%m/%Y"


def _cell(value: Any, tz: tzinfo) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        # Stored as UTC; the reader expects their own calendar day
        return as_utc(value).astimezone(tz).strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value  # enums
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


def to_csv(rows: Iterable[Dict[str, Any]], columns: Optional[List[str]] = None,
           tz: Optional[tzinfo] = None) -> str:
    tz = tz or resolve_timezone(settings.DEFAULT_TIMEZONE)
    records = [{k: _cell(v, tz) for k, v in row.items()} for row in rows]
    df = pd.DataFrame.from_records(records, columns=columns)
    return CSV_BOM + df.to_csv(sep=CSV_SEPARATOR, index=False, lineterminator="\n")


def csv_filename(prefix: str, today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"{prefix}_{today.isoformat()}.csv"


def to_json_backup(collections: Dict[str, List[Dict[str, Any]]]) -> str:
    payload = dict(collections)
    payload["exported_at"] = datetime.now(timezone.utc).isoformat()
    return json.dumps(payload, ensure_ascii=False, indent=2, default=str)
