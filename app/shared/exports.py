"""File export helpers"""

import csv
import logging
from datetime import datetime
from io import StringIO
from typing import Iterable

from fastapi.responses import StreamingResponse

logger = logging.getLogger(__name__)


def csv_response(filename_prefix: str, header: list[str], rows: Iterable[list]) -> StreamingResponse:
    """Render rows as a CSV attachment named <prefix>_<timestamp>.csv"""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(header)

    count = 0
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
        count += 1

    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    filename = f"{filename_prefix}_{timestamp}.csv"
    logger.info(f"✅ CSV export generated: {filename} ({count} rows)")

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )


def format_datetime(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""
