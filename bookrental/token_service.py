"""Business rules for issued tokens."""

from __future__ import annotations

from contextlib import suppress

from .models import LogoutRequest, ServiceError, TokenType
from .repositories import RepositoryError, TokenRepository, UserRepository


class TokenService:
    """Revokes tokens when a user logs out."""

    def __init__(self, token_repo: TokenRepository, user_repo: UserRepository) -> None:
        self.token_repo = token_repo
        self.user_repo = user_repo

    def logout(self, request: LogoutRequest) -> None:
        """Revoke every active token of the refresh token's owner.

        An unknown refresh token is ignored. Expired tokens are purged
        afterwards on a best-effort basis.
        """
        try:
            issued = self.token_repo.find_token_by_value(request.refresh_token)
        except RepositoryError as exc:
            raise ServiceError(f"error finding token: {exc}") from exc
        if issued is None:
            return
        if issued.token_type != TokenType.REFRESH:
            raise ServiceError("invalid token type")
        try:
            self.token_repo.revoke_all_user_tokens(issued.user_id)
        except RepositoryError as exc:
            raise ServiceError(f"error revoking user tokens: {exc}") from exc
        with suppress(RepositoryError):
            self.token_repo.cleanup_expired_tokens()