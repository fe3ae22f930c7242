from .dto import AccountOut, CredentialsIn, RegisterIn
from .service import CredentialService

__all__ = ["AccountOut", "CredentialService", "CredentialsIn", "RegisterIn"]
