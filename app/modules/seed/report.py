from dataclasses import dataclass, field

@dataclass
class LoadReport:
    kind: str
    environment: str
    merged: int = 0
    duplicates: int = 0
    validated: int = 0
    inserted: int = 0
    files_copied: int = 0
    files_skipped: int = 0
    files_errored: int = 0
    files_missing: int = 0
    assets_registered: int = 0
    warnings: list[str] = field(default_factory=list)
    file_errors: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{self.kind} [{self.environment}]: merged={self.merged} duplicates={self.duplicates} "
            f"inserted={self.inserted} files copied={self.files_copied} skipped={self.files_skipped} "
            f"errors={self.files_errored} missing={self.files_missing}"
        )

    def check_summary(self) -> str:
        return f"{self.kind} [{self.environment}]: merged={self.merged} duplicates={self.duplicates} valid={self.validated}"

@dataclass
class BatchReport:
    environment: str
    reports: dict[str, LoadReport] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures
