from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class UserSession:
    """
    The identity the client holds after login.

    Starts empty; ``start`` is called with the server's {id, username} on a
    successful login and ``end`` on logout.
    """

    def __init__(self) -> None:
        self.user_id: int | None = None
        self.username: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None and bool(self.username)

    def start(self, identity: dict[str, Any]) -> None:
        self.user_id = int(identity["id"])
        self.username = identity["username"]
        logger.info("Signed in as %s (id=%s)", self.username, self.user_id)

    def end(self) -> None:
        if self.is_authenticated:
            logger.info("Signed out %s", self.username)
        self.user_id = None
        self.username = None
