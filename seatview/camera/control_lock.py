# seatview/camera/control_lock.py

from typing import Iterable, List
from seatview.core.logging import get_logger

logger = get_logger()


class ControlToken:
    """Proof that an owner holds a driver's external-control lock."""

    def __init__(self, lock: 'ExternalControlLock', owner: str):
        self.lock = lock
        self.owner = owner
        self.released = False

    def release(self):
        self.lock.release(self)

    def __repr__(self):
        state = "released" if self.released else "held"
        return f"ControlToken({self.lock.name}, owner={self.owner!r}, {state})"


class ExternalControlLock:
    """
    Keeps a rotation driver away from the camera while anyone holds a token.
    Each holder releases only its own token.
    """

    def __init__(self, name: str):
        self.name = name
        self._tokens: List[ControlToken] = []

    @property
    def locked(self) -> bool:
        return bool(self._tokens)

    @property
    def owners(self) -> List[str]:
        return [token.owner for token in self._tokens]

    def acquire(self, owner: str) -> ControlToken:
        token = ControlToken(self, owner)
        self._tokens.append(token)
        logger.debug(f"{self.name}: external control acquired by {owner}")
        return token

    def release(self, token: ControlToken):
        if token.lock is not self:
            raise ValueError(f"Token for '{token.lock.name}' released on '{self.name}'")

        if token.released:
            return

        self._tokens.remove(token)
        token.released = True
        logger.debug(f"{self.name}: external control released by {token.owner}")


class ControlLease:
    """
    One owner's tokens across several drivers' locks, released together.
    """

    def __init__(self, owner: str, locks: Iterable[ExternalControlLock]):
        self.owner = owner
        self.tokens = [lock.acquire(owner) for lock in locks]

    @property
    def active(self) -> bool:
        return any(not token.released for token in self.tokens)

    def release(self):
        for token in self.tokens:
            token.release()

    def __enter__(self) -> 'ControlLease':
        return self

    def __exit__(self, *args):
        self.release()
