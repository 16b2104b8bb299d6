"""Run tickets used to abandon superseded matching runs."""

import logging
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class TicketCounter:
    """Owns the current run epoch; advancing it supersedes every older run."""

    def __init__(self, start: int = 0):
        self._current = start
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        """The ticket of the newest run."""
        with self._lock:
            return self._current

    def advance(self) -> int:
        """Start a new epoch and return its ticket."""
        with self._lock:
            self._current += 1
            return self._current

    def token(self, ticket: int | None = None) -> "CancellationToken":
        """Create a token bound to a ticket, defaulting to the current one."""
        return CancellationToken(self, self.current if ticket is None else ticket)


class CancellationToken:
    """A ticket checked by each stage before it produces further effects."""

    def __init__(self, counter: TicketCounter, ticket: int):
        self.counter = counter
        self.ticket = ticket

    @property
    def expired(self) -> bool:
        """True once a newer run has started."""
        return self.counter.current != self.ticket

    def check(self, stage: str) -> "Cancelled | None":
        """
        Check the ticket on behalf of a stage.

        Args:
            stage: Name of the stage doing the check

        Returns:
            A Cancelled marker if the ticket has expired, None otherwise
        """
        if self.expired:
            logger.debug(
                f"Ticket {self.ticket} expired in {stage} (current {self.counter.current})"
            )
            return Cancelled(stage=stage, ticket=self.ticket)
        return None


@dataclass(frozen=True)
class Cancelled:
    """Result returned by a stage that stopped because its ticket expired."""

    stage: str
    ticket: int
