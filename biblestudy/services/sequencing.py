"""
Last-issued-wins ordering for concurrent refreshes of the same piece of state.
"""


class RequestSequencer:
    """
    Hands out increasing tickets and accepts a result only if its ticket is
    newer than the last one applied, so a slow stale request cannot
    overwrite a fresher result.
    """

    def __init__(self):
        self._issued = 0
        self._applied = 0

    def next_ticket(self) -> int:
        self._issued += 1
        return self._issued

    def try_apply(self, ticket: int) -> bool:
        if ticket <= self._applied:
            return False
        self._applied = ticket
        return True

    def invalidate(self) -> None:
        """Discard every ticket issued so far."""
        self._applied = self._issued = self._issued + 1

    @property
    def last_applied(self) -> int:
        return self._applied
