"""CSV rendering for download endpoints."""

import csv
import io
import re
from typing import Any, Iterable, Sequence

from fastapi.responses import Response

_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._ -]+')


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def safe_filename(name: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub("", name).strip()
    return cleaned or "export"


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{safe_filename(filename)}"'},
    )
