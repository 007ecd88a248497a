"""Reading and writing resource records as JSON or line-delimited JSON.

The file suffix picks the format: ``.jsonl`` / ``.ndjson`` hold one record
per line, anything else holds a single object or an array of objects.
Unparsable input raises ``ValueError`` naming the file, and the line for
line-delimited files.
"""

import json
from pathlib import Path
from typing import Any

JSONL_SUFFIXES = (".jsonl", ".ndjson")


def is_jsonl(path: Path | str) -> bool:
    """Whether a path names a line-delimited JSON file."""
    return Path(path).suffix.lower() in JSONL_SUFFIXES


def read_json(path: Path | str) -> Any:
    """Read a single JSON document."""
    with open(path) as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e


def read_records(path: Path | str) -> list[Any]:
    """Read every record of a file.

    A JSON array yields its elements and any other JSON document yields a
    single record. Blank lines in line-delimited files are skipped. Records
    are returned as parsed; callers decide what to do with non-objects.
    """
    if not is_jsonl(path):
        data = read_json(path)
        return data if isinstance(data, list) else [data]

    records: list[Any] = []
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path} on line {line_num}: {e}") from e
    return records


def write_records(
    path: Path | str,
    records: list[dict[str, Any]],
    indent: int | None = 2,
) -> int:
    """Write records in the format named by the file suffix.

    Line-delimited files get one compact record per line. A JSON file holding
    exactly one record is written as a bare object, otherwise as an array;
    ``indent`` applies to JSON files only.

    Returns:
        Number of records written.
    """
    with open(path, "w") as f:
        if is_jsonl(path):
            f.writelines(json.dumps(record, ensure_ascii=False) + "\n" for record in records)
        else:
            data: Any = records[0] if len(records) == 1 else records
            json.dump(data, f, ensure_ascii=False, indent=indent)
            f.write("\n")
    return len(records)
