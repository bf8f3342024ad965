from dataclasses import dataclass, field

class ReconcileError(Exception):
    """Fatal for one kind's reconciliation pass; other kinds still run."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

class UnknownSeedKind(ReconcileError):
    def __init__(self, kind: str):
        super().__init__(kind, f"Unknown seed kind: {kind}")

class SourceUnreadable(ReconcileError):
    def __init__(self, kind: str, path: str, reason: str):
        self.path = path
        super().__init__(kind, f"Cannot read seed source for {kind} at {path}: {reason}")

class ValidationFailed(ReconcileError):
    def __init__(self, kind: str, field: str, record_id: str | None, reason: str):
        self.field = field
        self.record_id = record_id
        self.reason = reason
        super().__init__(kind, f"Validation failed for {kind}: field '{field}' in record {record_id or '<no id>'}: {reason}")

class BulkInsertFailed(ReconcileError):
    def __init__(self, kind: str, reason: str):
        self.reason = reason
        super().__init__(kind, f"Bulk insert failed for {kind}: {reason}")

@dataclass(frozen=True)
class FileNotFound:
    """Recoverable: a referenced seed file exists in no candidate directory nor at its destination."""

    kind: str
    reference: str
    searched: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"File not found for {self.kind}: {self.reference}"
