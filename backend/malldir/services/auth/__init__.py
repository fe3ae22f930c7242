from .dto import LogoutIn, RefreshIn, SessionOut, StatusOut
from .service import AuthService

__all__ = ["AuthService", "LogoutIn", "RefreshIn", "SessionOut", "StatusOut"]
