# malldir/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from malldir.services.credentials.dto import AccountOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param authorization: Raw ``Authorization`` header value, if any.
    :type authorization: str | None
    :param all_sessions: If True, revoke every refresh session of the caller.
    :type all_sessions: bool
    """

    authorization: str | None = None
    all_sessions: bool = False


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT taken from the cookie.
    :type refresh_token: str | None
    """

    refresh_token: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of register/login/refresh.

    :param access_token: Encoded access JWT, returned in the body.
    :param refresh_token: Encoded refresh JWT, set as a cookie.
    :param account: Account the session belongs to.
    """

    access_token: str
    refresh_token: str
    account: AccountOut


@dataclass(frozen=True, slots=True)
class StatusOut:
    """
    Result of a status check. ``account`` is set only when authenticated.

    :param authenticated: Whether the presented access token verified.
    :param account: Current account snapshot when authenticated.
    """

    authenticated: bool
    account: AccountOut | None = None
