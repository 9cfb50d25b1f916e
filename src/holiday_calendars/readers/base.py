"""Abstract base class for holiday feed readers."""

from abc import ABC, abstractmethod


class FeedReader(ABC):
    """Abstract base class for holiday feed readers."""

    @abstractmethod
    def fetch(self, location: str) -> bytes:
        """
        Retrieve the raw feed content.

        Args:
            location: Feed URL or local file path

        Returns:
            Raw feed bytes

        Raises:
            FeedFetchError: If the feed cannot be retrieved
        """
