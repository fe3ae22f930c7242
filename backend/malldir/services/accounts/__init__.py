from .dto import AccountListOut, AccountUpdateIn
from .service import AccountService

__all__ = ["AccountListOut", "AccountService", "AccountUpdateIn"]
