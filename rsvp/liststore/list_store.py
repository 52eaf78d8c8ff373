from abc import ABC, abstractmethod


class ListStoreError(Exception):
    """Raised when a list store call fails."""


class ListStore(ABC):
    """
    Interface for key-value stores holding Redis-style lists and counters.
    """

    @abstractmethod
    def lpush(self, key: str, value: str) -> int:
        """
        Push value onto the head of the list at key; return the new length.
        """
        error_message = "lpush not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def lrange(self, key: str, start: int, stop: int) -> list[str]:
        """
        Return elements start..stop (inclusive); negative indexes count from
        the tail, so lrange(key, 0, -1) returns the whole list.
        """
        error_message = "lrange not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def lrem(self, key: str, count: int, value: str) -> int:
        """
        Remove occurrences of value: the first count from the head when
        count > 0, the last -count from the tail when count < 0, all when 0.
        Return how many were removed.
        """
        error_message = "lrem not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def incr(self, key: str) -> int:
        error_message = "incr not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def decr(self, key: str) -> int:
        error_message = "decr not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def delete(self, key: str) -> int:
        """
        Delete key (list or counter); return 1 if it existed, else 0.
        """
        error_message = "delete not implemented"
        raise NotImplementedError(error_message)
