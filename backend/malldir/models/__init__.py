from malldir.models.account import Account, AccountStatus, Role

__all__ = ["Account", "AccountStatus", "Role"]
