from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Union

PathLike = Union[str, Path]

def write_jsonl(records_iterable: Iterable[Mapping], out_path: PathLike) -> int:
    """Write an iterable of mapping records to a UTF-8 JSONL file; returns the count."""
    n = 0
    with open(out_path, "w", encoding="utf-8") as f:
        for rec in records_iterable:
            f.write(json.dumps(rec, ensure_ascii=False, default=str) + "\n")
            n += 1
    return n

def read_jsonl(path: PathLike) -> Iterator[Any]:
    """Yield Python objects from a JSONL file lazily."""
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue

def save_json(data: Any, out_path: PathLike) -> None:
    """Dump ``data`` as indented JSON, creating parent directories."""
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
