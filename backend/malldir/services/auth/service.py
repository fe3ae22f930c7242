# malldir/services/auth/service.py
from __future__ import annotations

import logging

from malldir.services._shared.base import BaseService, ServiceContext
from malldir.services._shared.errors import (
    InvalidCredentialsError,
    InvalidTokenError,
    RefreshTokenReuseError,
    TokenError,
)
from malldir.services._shared.ports import (
    RefreshSessionStore,
    RevocationRegistry,
    RotationResult,
)
from malldir.services.auth.dto import LogoutIn, RefreshIn, SessionOut, StatusOut
from malldir.services.credentials import AccountOut, CredentialService, CredentialsIn, RegisterIn
from malldir.services.tokens import AccessClaims, TokenIssuer, TokenVerifier, extract_bearer

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Session lifecycle: register, login, logout, status and refresh.

    Credentials are checked by :class:`CredentialService`, tokens minted by
    :class:`TokenIssuer` and checked by :class:`TokenVerifier`. Logout
    revokes the presented access token through the revocation registry;
    refresh tokens rotate on every exchange and a reused one revokes all
    sessions of its account.
    """

    def __init__(
        self,
        *,
        issuer: TokenIssuer,
        verifier: TokenVerifier,
        registry: RevocationRegistry,
        refresh_store: RefreshSessionStore,
        credentials: CredentialService | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param issuer: Mints access/refresh tokens.
        :param verifier: Validates access and refresh tokens.
        :param registry: Revocation registry shared with ``verifier``.
        :param refresh_store: Server-side refresh sessions shared with ``issuer``.
        :param credentials: Account credential service.
        """
        super().__init__(ctx=ctx)
        self.issuer = issuer
        self.verifier = verifier
        self.registry = registry
        self.refresh_store = refresh_store
        self.credentials = credentials or CredentialService(ctx=ctx)

    # ------------------------------------------------------------------ #
    # Register / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionOut:
        """
        Create an account and open a session for it.

        :raises DuplicateIdentityError: If the email or username is taken.
        """
        account = self.credentials.register(dto)
        return self._open_session(account)

    def login(self, dto: CredentialsIn) -> SessionOut:
        """
        Authenticate credentials and open a session.

        :raises InvalidCredentialsError: Unknown email, wrong password or
            inactive account (the concrete subclass is only logged).
        """
        try:
            account = self.credentials.verify(dto)
        except InvalidCredentialsError as exc:
            log.warning("Login rejected", extra={"kind": type(exc).__name__})
            raise
        account = self.credentials.mark_logged_in(account.id)
        log.info("Login succeeded", extra={"account_id": account.id})
        return self._open_session(account)

    def _open_session(self, account: AccountOut) -> SessionOut:
        access = self.issuer.issue_access_token(
            AccessClaims(id=account.id, username=account.username, role=account.role)
        )
        refresh = self.issuer.issue_refresh_token(account.id)
        return SessionOut(access_token=access, refresh_token=refresh, account=account)

    # ------------------------------------------------------------------ #
    # Logout / Status
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the presented access token.

        Without a bearer token this is a no-op (the caller still clears the
        cookie). With ``all_sessions`` the token must verify, and every
        refresh session of the account is revoked as well.

        :raises TokenError: Only when ``all_sessions`` is requested and the
            token does not verify.
        """
        if dto.all_sessions:
            identity = self.verifier.verify(dto.authorization)
            revoked = self.refresh_store.revoke_all_for_account(identity.id)
            log.info(
                "All refresh sessions revoked (%d)", revoked, extra={"account_id": identity.id}
            )

        try:
            token = extract_bearer(dto.authorization)
        except TokenError:
            log.info("Logout without bearer token")
            return
        self.registry.add(token)
        log.info("Access token revoked on logout")

    def status(self, authorization: str | None) -> StatusOut:
        """
        Report whether the caller is authenticated. Never raises for token
        problems; the failure kind is logged at DEBUG.
        """
        try:
            identity = self.verifier.verify(authorization)
        except TokenError as exc:
            log.debug("Status check unauthenticated", extra={"kind": type(exc).__name__})
            return StatusOut(authenticated=False)
        account = self.credentials.load_active(identity.id)
        if account is None:
            return StatusOut(authenticated=False)
        return StatusOut(authenticated=True, account=account)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> SessionOut:
        """
        Exchange a refresh token for a new access token and a rotated refresh token.

        Role and username are re-read from the account, so a role change
        takes effect on the next refresh.

        :raises MissingTokenError: No refresh token presented.
        :raises RefreshTokenReuseError: The token was already exchanged; all
            sessions of the account are revoked.
        :raises InvalidTokenError: Expired, revoked or unknown session, or the
            account is gone or inactive.
        """
        claims = self.verifier.decode_refresh(dto.refresh_token)

        account = self.credentials.load_active(claims.account_id)
        if account is None:
            self.refresh_store.mark_revoked(claims.jti)
            raise InvalidTokenError("Account missing or inactive.")

        now = self.now_utc()
        new_jti = self.refresh_store.new_jti()
        new_expires_at = now + self.issuer.cfg.refresh_expires
        result = self.refresh_store.rotate(
            old_jti=claims.jti, new_jti=new_jti, now=now, new_expires_at=new_expires_at
        )

        if result is RotationResult.REUSED:
            self.refresh_store.revoke_all_for_account(account.id)
            log.warning("Refresh token reuse detected", extra={"account_id": account.id})
            raise RefreshTokenReuseError("Refresh token reuse detected.")
        if result is not RotationResult.OK:
            raise InvalidTokenError(f"Refresh session rejected: {result.name}")

        access = self.issuer.issue_access_token(
            AccessClaims(id=account.id, username=account.username, role=account.role)
        )
        refresh = self.issuer.sign_refresh_token(
            account.id, jti=new_jti, issued_at=now, expires_at=new_expires_at
        )
        log.info("Refresh token rotated", extra={"account_id": account.id})
        return SessionOut(access_token=access, refresh_token=refresh, account=account)
