"""Unit tests for :class:`malldir.repositories.account.AccountRepository`."""

from __future__ import annotations

import pytest
from malldir.repositories.account import AccountRepository
from malldir.repositories.base import Pagination

from tests.factories.account import AccountFactory


@pytest.fixture()
def repo(session) -> AccountRepository:
    return AccountRepository(session=session)


def test_get_by_email_is_case_insensitive(repo):
    account = AccountFactory(email="mixed@example.com")
    assert repo.get_by_email("  MIXED@example.com ") is account
    assert repo.get_by_email("nobody@example.com") is None


def test_exists_checks_honour_exclude_id(repo):
    account = AccountFactory(email="e@example.com", username="euser")

    assert repo.exists_by_email("E@example.com") is True
    assert repo.exists_by_email("e@example.com", exclude_id=account.id) is False
    assert repo.exists_by_username("euser") is True
    assert repo.exists_by_username("euser", exclude_id=account.id) is False
    assert repo.exists_by_username("EUSER") is False


def test_update_whitelist(repo):
    account = AccountFactory()
    with pytest.raises(ValueError):
        repo.update(account, role="admin")
    with pytest.raises(ValueError):
        repo.update(account, status="inactive")


def test_update_password_rehashes(repo):
    account = AccountFactory(password="old-password")
    before = account.password_hash

    repo.update(account, password="new-password")

    assert account.password_hash != before
    assert account.verify_password("new-password") is True


def test_paginate_sorts_and_counts(repo):
    for name in ("charlie", "alpha", "bravo"):
        AccountFactory(username=name)

    page = repo.paginate(Pagination(page=1, limit=2, sort=["username"]))
    assert page.total == 3
    assert [a.username for a in page.items] == ["alpha", "bravo"]

    page2 = repo.paginate(Pagination(page=2, limit=2, sort=["username"]))
    assert [a.username for a in page2.items] == ["charlie"]


def test_paginate_ignores_unknown_sort_tokens(repo):
    first = AccountFactory()
    second = AccountFactory()

    page = repo.paginate(Pagination(page=1, limit=10, sort=["password_hash", "-nope"]))
    assert [a.id for a in page.items] == [first.id, second.id]


def test_paginate_descending(repo):
    first = AccountFactory()
    second = AccountFactory()

    page = repo.paginate(Pagination(page=1, limit=10, sort=["-id"]))
    assert [a.id for a in page.items] == [second.id, first.id]
