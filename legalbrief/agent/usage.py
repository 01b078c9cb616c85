"""Token usage accounting for completed model calls."""

import logging
from collections.abc import Callable

from legalbrief.models import ModelUsage

logger = logging.getLogger(__name__)

UsageListener = Callable[[int], None]


def representative_count(usage: ModelUsage | None) -> int:
    """Pick one token count for a call.

    Total tokens win when positive, then prompt tokens, then candidate tokens.
    """
    if usage is None:
        return 0
    for count in (usage.total_tokens, usage.prompt_tokens, usage.candidate_tokens):
        if count:
            return count
    return 0


class UsageTracker:
    """Forwards the token count of each completed call to its observers.

    Holds no history. Observers are responsible for accumulation.
    """

    def __init__(self) -> None:
        self._listeners: list[UsageListener] = []

    def subscribe(self, listener: UsageListener) -> Callable[[], None]:
        """Register an observer.

        Returns:
            A callable that removes the observer again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_listener(self, listener: UsageListener) -> None:
        """Replace every registered observer with a single one."""
        if self._listeners:
            logger.debug(f"Replacing {len(self._listeners)} usage listener(s)")
        self._listeners = [listener]

    def record(self, usage: ModelUsage | None) -> None:
        count = representative_count(usage)
        if count <= 0:
            return
        for listener in list(self._listeners):
            listener(count)


class UsageMeter:
    """Observer keeping the running token total of a session."""

    def __init__(self) -> None:
        self.total_tokens = 0

    def __call__(self, count: int) -> None:
        self.total_tokens += count
