"""Protocol definition for lock file parsers."""

from typing import Any, Protocol

from ..models import ModeFlags
from .models import LockContents


class LockfileParser(Protocol):
    """Protocol for lock file parser plugins.

    Each parser implements this protocol to read one lock file format.
    Parsers are registered with ParserRegistry and selected by the lock file
    name, or by sniffing the decoded TOML when the name is not conclusive.

    Example:
        class UvLockParser:
            name = "uv-lock"
            supported_files = ("uv.lock", "uv-workspace.lock")
            modes = ModeFlags(uv_mode=True)

            def supports(self, lock_file_name: str) -> bool:
                return lock_file_name in self.supported_files

            def sniff(self, data: dict) -> bool:
                return isinstance(data.get("version"), int)

            def parse(self, data: dict) -> LockContents:
                ...
    """

    @property
    def name(self) -> str:
        """Human-readable name of this parser, used for logging."""
        ...

    @property
    def supported_files(self) -> tuple[str, ...]:
        """Lock file names (not paths) this parser handles."""
        ...

    @property
    def modes(self) -> ModeFlags:
        """Mode flags implied by the lock format itself."""
        ...

    def supports(self, lock_file_name: str) -> bool:
        """Check if this parser handles the given lock file name."""
        ...

    def sniff(self, data: dict[str, Any]) -> bool:
        """Check if decoded TOML looks like this parser's format."""
        ...

    def parse(self, data: dict[str, Any]) -> LockContents:
        """Extract packages and their dependencies from decoded TOML.

        Entries without a name are skipped. Parsers never resolve names to
        identifiers; that happens once, for all formats, when the bundle is
        assembled.
        """
        ...
