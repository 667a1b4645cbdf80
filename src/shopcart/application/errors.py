"""Request-scoped error accumulator.

Every handler call creates its own accumulator and threads it through
the pipeline stages.  Nothing is shared between requests.
"""

from __future__ import annotations

from shopcart.domain.exceptions import DomainException, EntityNotFoundError


class ErrorAccumulator:

    def __init__(self) -> None:
        self._messages: list[str] = []
        self._only_not_found = True

    def add(self, message: str) -> None:
        self._messages.append(message)
        self._only_not_found = False

    def record(self, exc: DomainException) -> None:
        """Append every message carried by *exc*."""
        self._messages.extend(exc.messages)
        if not isinstance(exc, EntityNotFoundError):
            self._only_not_found = False

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(self._messages)

    @property
    def has_errors(self) -> bool:
        return bool(self._messages)

    @property
    def is_not_found(self) -> bool:
        """True when every recorded error was a missing cart or item."""
        return self.has_errors and self._only_not_found

    def __bool__(self) -> bool:
        return self.has_errors

    def __len__(self) -> int:
        return len(self._messages)
