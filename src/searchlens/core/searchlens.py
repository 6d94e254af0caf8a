"""Core SearchLens facade.

This module defines the main entry point used by applications and tests.
"""

import logging
from typing import Any

from dotenv import load_dotenv

from searchlens.core.index.protocols import SearchIndex
from searchlens.core.query.frankenstein import Frankenstein
from searchlens.core.query.sherlock import Sherlock
from searchlens.core.spock.spock import Spock

logger = logging.getLogger(__name__)
load_dotenv()


class SearchLens:
    """Core facade binding one search index to configuration and executors."""

    def __init__(self, *args, **kwargs):
        """Prevent direct construction; use `SearchLens.create(...)` instead."""
        raise RuntimeError("Use: instance = SearchLens.create(...)")

    def _initialize(self, *, index: SearchIndex | None, config_path: str | None = None):
        """Initialize SearchLens internal components.

        Args:
            index: The search index queries run against
            config_path: Path to JSON configuration file
        """
        self.index = index
        self.spock = Spock(config_path=config_path)
        self.frankenstein = Frankenstein(index)

        # Alias
        self.config_manager = self.spock
        self.materializer = self.frankenstein
        logger.debug("SearchLens instance created for index %s", getattr(index, "id", None))

    @classmethod
    def create(
        cls,
        *,
        index: SearchIndex | None,
        config_path: str | None = None,
        config: dict[str, Any] | None = None,
    ) -> "SearchLens":
        """Factory method to create and initialize SearchLens.

        Args:
            index: The search index queries run against
            config_path: Path to JSON configuration file
            config: Optional configuration dictionary
        """
        instance = cls.__new__(cls)  # bypass __init__
        instance._initialize(index=index, config_path=config_path)
        instance.spock.load(config=config)
        return instance

    def query(
        self,
        *,
        display: str = "default",
        count_required: bool = False,
        options: dict[str, Any] | None = None,
    ) -> Sherlock:
        """Start a new search against the bound index.

        Args:
            display: Name of the display running the search.
            count_required: Whether the total count must be computed.
            options: Extra backend query options.

        Returns:
            A Sherlock executor in the BUILDING state, or in the FAILED state
            when the backend query could not be created.
        """
        return Sherlock(
            self.index,
            spock=self.spock,
            options=options,
            display=display,
            count_required=count_required,
            materializer=self.frankenstein,
        )
