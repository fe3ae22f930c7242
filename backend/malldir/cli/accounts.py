"""Flask CLI commands for out-of-band account administration.

Roles and status are never editable through the HTTP API; operators use
these commands instead.
"""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from malldir.core import security
from malldir.models.account import AccountStatus, Role
from malldir.services._shared.errors import DuplicateIdentityError
from malldir.services.credentials import CredentialService, RegisterIn
from malldir.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("accounts")
def accounts_cli() -> None:
    """Account administration commands."""


@accounts_cli.command("create-admin")
@click.option("--email", required=True)
@click.option("--username", required=True)
@click.password_option("--password", help="Prompted (with confirmation) when omitted.")
@with_appcontext
def create_admin_command(email: str, username: str, password: str) -> None:
    """Register an account and promote it to ``admin``."""
    try:
        account = CredentialService().register(
            RegisterIn(username=username, email=email, password=password)
        )
    except DuplicateIdentityError as exc:
        raise click.ClickException(exc.detail) from exc

    with SQLAlchemyUnitOfWork() as uow:
        row = uow.accounts.get(account.id)
        row.role = Role.ADMIN.value
    LOGGER.info("Admin account created", extra={"account_id": account.id})
    click.echo(f"Created admin {account.email} (id={account.id})")


@accounts_cli.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice([r.value for r in Role]))
@with_appcontext
def set_role_command(email: str, role: str) -> None:
    """Change the role of the account registered with EMAIL.

    Takes effect on the account's next login or refresh.
    """
    with SQLAlchemyUnitOfWork() as uow:
        account = uow.accounts.get_by_email(email)
        if account is None:
            raise click.ClickException(f"No account for {email}")
        account.role = role
        account_id = account.id
    LOGGER.info("Account role changed to %s", role, extra={"account_id": account_id})
    click.echo(f"{email}: role={role}")


@accounts_cli.command("set-status")
@click.argument("email")
@click.argument("status", type=click.Choice([s.value for s in AccountStatus]))
@with_appcontext
def set_status_command(email: str, status: str) -> None:
    """Activate or deactivate the account registered with EMAIL.

    Deactivating also revokes every refresh session of the account.
    """
    with SQLAlchemyUnitOfWork() as uow:
        account = uow.accounts.get_by_email(email)
        if account is None:
            raise click.ClickException(f"No account for {email}")
        account.status = status
        account_id = account.id

    revoked = 0
    if status == AccountStatus.INACTIVE.value:
        revoked = security.refresh_store().revoke_all_for_account(account_id)
    LOGGER.info("Account status changed to %s", status, extra={"account_id": account_id})
    click.echo(f"{email}: status={status} (refresh sessions revoked: {revoked})")
