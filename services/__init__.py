from services.auth_flow import AuthenticationFlow, AuthenticationResponse
from services.credentials import CredentialsAuthenticator
from services.refresh_tokens import RefreshTokenStore
from services.user_directory import UserDirectory

__all__ = [
    "AuthenticationFlow",
    "AuthenticationResponse",
    "CredentialsAuthenticator",
    "RefreshTokenStore",
    "UserDirectory",
]
