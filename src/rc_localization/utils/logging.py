from dataclasses import asdict, fields, is_dataclass
from pathlib import Path
import csv
from typing import Dict, Any, Iterable

class CsvLogger:
    """Per-cycle telemetry to CSV. Each row is flushed so a crashed run still leaves data."""
    def __init__(self, path: str, fieldnames: Iterable[str]):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.f = open(path, 'w', newline='')
        self.writer = csv.DictWriter(self.f, fieldnames=list(fieldnames))
        self.writer.writeheader()
    @classmethod
    def for_dataclass(cls, path: str, dc_type, *extra: str) -> "CsvLogger":
        return cls(path, [f.name for f in fields(dc_type)] + list(extra))
    def write(self, row, **extra: Any):
        data: Dict[str, Any] = asdict(row) if is_dataclass(row) else dict(row)
        data.update(extra)
        self.writer.writerow(data); self.f.flush()
    def close(self):
        if not self.f.closed:
            self.f.close()
    def __enter__(self):
        return self
    def __exit__(self, *exc):
        self.close()
