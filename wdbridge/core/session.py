"""In-memory session state for WD Bridge (wdbridge)."""

from dataclasses import dataclass, field
from typing import Optional

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Credentials:
    """Username and password cached for transparent re-authentication."""

    username: str
    password: str = field(repr=False)


@dataclass
class Session:
    """Bearer token and cached credentials of one logged-in user."""

    bearer_token: Optional[str] = None
    credentials: Optional[Credentials] = None

    def replace_token(self, id_token: str) -> None:
        """Swap in a freshly issued token."""
        self.bearer_token = f"{BEARER_PREFIX}{id_token}"

    @property
    def authorization(self) -> str:
        """Value for the ``authorization`` header (empty before login)."""
        return self.bearer_token or ""

    @property
    def access_token(self) -> str:
        """Raw token, as passed in the ``access_token`` query parameter."""
        token = self.authorization
        if token.startswith(BEARER_PREFIX):
            return token[len(BEARER_PREFIX):]
        return token

    @property
    def is_authenticated(self) -> bool:
        return self.bearer_token is not None
