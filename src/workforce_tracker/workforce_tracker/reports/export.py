from __future__ import annotations

import csv
import io
from typing import Iterable, Mapping, Optional, Sequence


def rows_to_csv(
    fieldnames: Sequence[str],
    rows: Iterable[Mapping],
    *,
    filters: Optional[Mapping[str, str]] = None,
) -> bytes:
    """Serialize report rows to CSV bytes (UTF-8 with BOM so Excel opens it cleanly).

    When filters are given they are written first as '# key: value' lines so the
    file carries the manifest of what it contains.
    """

    out = io.StringIO()
    for key, value in (filters or {}).items():
        out.write(f"# {key}: {value}\r\n")

    writer = csv.DictWriter(out, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    return out.getvalue().encode("utf-8-sig")
