import secrets
from typing import Dict, Optional, Set


def _six_digits() -> str:
    return str(100000 + secrets.randbelow(900000))


class TokenRegistry:
    """Short numeric session tokens, valid until the next reset.

    Tokens carry no payload: the caller sends its identity next to the
    token and the two are not bound together. Login is two steps, so the
    registry also keeps the temporary credentials handed out after the
    identity check and before the period check.
    """

    def __init__(self):
        self._active: Set[str] = set()
        self._pending: Dict[str, str] = {}

    def issue(self, identity: str) -> str:
        token = _six_digits()
        while token in self._active:
            token = _six_digits()
        self._active.add(token)
        return token

    def is_valid(self, token: Optional[str]) -> bool:
        return bool(token) and token in self._active

    def revoke_all(self) -> None:
        self._active.clear()
        self._pending.clear()

    def issue_pending(self, identity: str) -> str:
        temp = _six_digits()
        while temp in self._pending:
            temp = _six_digits()
        self._pending[temp] = identity
        return temp

    def pending_identity(self, temp: Optional[str]) -> Optional[str]:
        if not temp:
            return None
        return self._pending.get(temp)

    def discard_pending(self, temp: str) -> None:
        self._pending.pop(temp, None)

    def __len__(self) -> int:
        return len(self._active)
