"""
exporter.py: JSON export of analysis results.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .models import Item

EXPORT_PREFIX = "exifai_export_"


@dataclass(frozen=True)
class ExportDocument:
    filename: str
    content: str

    def to_records(self) -> List[Dict[str, Any]]:
        return json.loads(self.content)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and a trailing Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_record(item: Item, exported_at: str) -> Dict[str, Any]:
    return {
        "id": item.id,
        "originalUrl": item.url,
        "status": item.status.value,
        "exifData": item.metadata.to_export() if item.metadata else None,
        "error": item.error or None,
        "exportedAt": exported_at,
    }


def build_export(items: Iterable[Item], now: Optional[datetime] = None) -> ExportDocument:
    """Serialize `items` into an export document named after the current UTC date."""
    now = now or datetime.now(timezone.utc)
    exported_at = iso_timestamp(now)
    records = [export_record(item, exported_at) for item in items]
    filename = f"{EXPORT_PREFIX}{now.astimezone(timezone.utc).strftime('%Y-%m-%d')}.json"
    return ExportDocument(filename=filename, content=json.dumps(records, indent=2))
