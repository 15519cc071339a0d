"""Append-only audit trail of Laybuy payment events."""

import os
from datetime import datetime
from typing import Optional

from laybuy_gateway.shared.correlation import current_correlation_id
from laybuy_gateway.shared.file_store import FileStore


class AuditLog:

    def __init__(self, data_dir: str):
        self.events_path = os.path.join(data_dir, "audit", "events.jsonl")

    def record(self, event_type: str, order_id: Optional[int] = None,
               actor: Optional[str] = None, **details) -> dict:
        entry = {
            "type": event_type,
            "order_id": order_id,
            "actor": actor or "system",
            "correlation_id": current_correlation_id(),
            "timestamp": datetime.utcnow().isoformat(),
            "details": details,
        }
        FileStore.append_jsonl(self.events_path, entry)
        return entry

    def entries_for_order(self, order_id: int) -> list[dict]:
        return [e for e in FileStore.read_jsonl(self.events_path) if e.get("order_id") == order_id]

    def all_entries(self, limit: int = 100, offset: int = 0) -> tuple[list[dict], int]:
        entries = FileStore.read_jsonl(self.events_path)
        total = len(entries)
        entries.reverse()  # newest first
        return entries[offset:offset + limit], total
