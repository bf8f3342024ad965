import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from app.modules.seed.errors import SourceUnreadable

log = logging.getLogger("seed.sources")

@dataclass
class MergeResult:
    records: list[Any] = field(default_factory=list)
    duplicates: int = 0
    warnings: list[str] = field(default_factory=list)
    sources_read: list[str] = field(default_factory=list)

def source_paths(root: Path, kind: str, environment: str) -> list[Path]:
    """Precedence order: data shared by every environment first, then the environment's own."""
    return [
        root / "shared" / kind / f"{kind}.json",
        root / environment / "common" / f"{kind}.json",
    ]

def _load(kind: str, path: Path, strict: bool = False) -> list[Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SourceUnreadable(kind, str(path), str(e)) from e
    if not isinstance(data, list):
        if strict:
            raise SourceUnreadable(kind, str(path), "top-level value is not an array")
        return [data]
    return data

def merge_sources(kind: str, environment: str, root: Path | str, *, strict: bool = False) -> MergeResult:
    """
    Concatenate every existing source for `kind` and drop later records whose
    id was already seen. The first occurrence wins; each drop is a warning.

    With `strict`, a document that is not a JSON array is rejected instead of
    being read as a single record.
    """
    result = MergeResult()
    seen: set[str] = set()
    for path in source_paths(Path(root), kind, environment):
        if not path.is_file():
            continue
        items = _load(kind, path, strict)
        result.sources_read.append(str(path))
        if not items:
            continue
        for item in items:
            record_id = item.get("id") if isinstance(item, dict) else None
            if record_id is not None:
                record_id = str(record_id)
                if record_id in seen:
                    msg = f"Duplicate id {record_id!r} for {kind} in {path}; keeping the first occurrence"
                    log.warning(msg)
                    result.warnings.append(msg)
                    result.duplicates += 1
                    continue
                seen.add(record_id)
            result.records.append(item)
        log.info("Loaded %d %s record(s) from %s", len(items), kind, path)
    return result
