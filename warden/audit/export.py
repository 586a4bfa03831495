"""CSV export of audit entries."""

import csv
import io
import json
from collections.abc import Iterable

from warden.audit.hashing import details_payload
from warden.audit.models import AuditEntry

CSV_HEADERS = ("Timestamp", "User", "Action", "Target Type", "Target ID", "Details")


def export_csv(entries: Iterable[AuditEntry]) -> str:
    """Render entries as CSV with every field quoted.

    Timestamps are ISO-8601 UTC with milliseconds and a trailing Z;
    details are compact JSON ({} when absent).
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        writer.writerow((
            entry.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            entry.user_email,
            entry.action.value,
            entry.target_type.value if entry.target_type else "",
            entry.target_id or "",
            json.dumps(details_payload(entry.details) or {}, separators=(",", ":")),
        ))
    return buffer.getvalue().rstrip("\n")
