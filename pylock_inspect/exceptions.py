"""Custom exceptions for pylock-inspect."""


class PylockInspectError(Exception):
    """Base exception for all pylock-inspect operations."""


class ConfigurationError(PylockInspectError):
    """Raised when configuration validation fails."""


class FileProcessingError(PylockInspectError):
    """Raised when an input cannot be read or parsed, or output cannot be written."""


class InputNotFoundError(PylockInspectError):
    """Raised when a declared input path does not exist."""

    def __init__(self, path, label: str = "Input file"):
        self.path = str(path)
        self.label = label
        super().__init__(f"{label} not found: {self.path}")


class MalformedGraphError(PylockInspectError):
    """Raised when the dependency graph references an unknown identifier."""

    def __init__(self, message: str, ref: str):
        self.ref = ref
        super().__init__(message)


class NotFoundError(PylockInspectError):
    """Raised when a name or identifier cannot be resolved in the graph."""

    def __init__(self, query: str, kind: str = "identifier"):
        self.query = query
        self.kind = kind
        if kind == "name":
            message = f"No package found in pkgList with name: {query}"
        else:
            message = f"No dependency node found for ref: {query}"
        super().__init__(message)
