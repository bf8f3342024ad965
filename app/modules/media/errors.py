class IngestError(Exception):
    """Base for user-facing ingest failures; `message` is shown verbatim to the admin."""

    status_code = 400
    field = "file"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        if field:
            self.field = field

class TypeNotAllowed(IngestError):
    status_code = 415

    def __init__(self, content_type: str, allowed: frozenset[str] | set[str], *, field: str | None = None):
        self.content_type = content_type
        self.allowed = sorted(allowed)
        super().__init__(f"File type not allowed. Allowed types: {', '.join(self.allowed)}", field=field)

class SizeExceeded(IngestError):
    status_code = 413

    def __init__(self, size: int, limit: int, *, field: str | None = None):
        self.size = size
        self.limit = limit
        super().__init__(f"File size exceeds limit of {limit / 1024 / 1024:g}MB", field=field)

class DuplicateContent(IngestError):
    status_code = 409

    def __init__(self, content_hash: str, category: str, *, field: str | None = None):
        self.content_hash = content_hash
        self.category = category
        super().__init__("The file already exists and is assigned to another record", field=field)

class BackendWriteFailed(IngestError):
    status_code = 502

    def __init__(self, backend: str, key: str, category: str, reason: str, *, file_name: str | None = None):
        self.backend = backend
        self.key = key
        self.category = category
        self.file_name = file_name
        self.reason = reason
        super().__init__(
            f"Storage write failed (backend={backend}, category={category}, key={key}, file={file_name or '-'}): {reason}"
        )

class InvalidImage(IngestError):
    status_code = 422

    def __init__(self, reason: str, *, field: str | None = None):
        self.reason = reason
        super().__init__("The file is not a readable image", field=field)
