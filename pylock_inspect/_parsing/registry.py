"""Registry for lock file parsers."""

from typing import Any

from ..logging_config import logger
from .protocol import LockfileParser


class ParserRegistry:
    """Registry for lock file parsers.

    Example:
        registry = ParserRegistry()
        registry.register(PoetryLockParser())
        registry.register(UvLockParser())

        parser = registry.select("uv.lock", data)
    """

    def __init__(self) -> None:
        self._parsers: list[LockfileParser] = []

    def register(self, parser: LockfileParser) -> None:
        """Register a parser.

        Args:
            parser: Parser instance implementing LockfileParser protocol.
        """
        self._parsers.append(parser)
        logger.debug(f"Registered lock parser: {parser.name} for {parser.supported_files}")

    def get_parser_for(self, lock_file_name: str) -> LockfileParser | None:
        """Get the parser that supports this lock file name.

        Args:
            lock_file_name: Filename (not full path) to find parser for

        Returns:
            Parser instance if found, None otherwise.
        """
        for parser in self._parsers:
            if parser.supports(lock_file_name):
                return parser
        return None

    def detect(self, data: dict[str, Any]) -> LockfileParser | None:
        """Find the first parser whose format matches decoded TOML content."""
        for parser in self._parsers:
            if parser.sniff(data):
                return parser
        return None

    def select(self, lock_file_name: str, data: dict[str, Any]) -> LockfileParser | None:
        """Pick a parser by file name, falling back to content sniffing."""
        parser = self.get_parser_for(lock_file_name)
        if parser is not None:
            return parser

        parser = self.detect(data)
        if parser is not None:
            logger.debug(f"Detected {parser.name} format from content of {lock_file_name}")
        return parser

    @property
    def registered_parsers(self) -> list[str]:
        """Get names of all registered parsers."""
        return [p.name for p in self._parsers]

    @property
    def supported_files(self) -> set[str]:
        """Get all supported lock file names."""
        result: set[str] = set()
        for parser in self._parsers:
            result.update(parser.supported_files)
        return result
