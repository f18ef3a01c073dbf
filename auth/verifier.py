"""
Bearer token verification.
Extracts bearer tokens and verifies them against Firebase Authentication.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError
from starlette.concurrency import run_in_threadpool

from utils import (
    auth_logger, config_manager, AuthConfig,
    UnauthorizedError, ForbiddenError, ConfigurationError, ErrorCodes,
)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    """已验证身份（令牌解码后的声明）"""
    uid: str
    email: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Identity":
        uid = claims.get("uid") or claims.get("sub")
        if not uid:
            raise ForbiddenError(
                "Forbidden access",
                ErrorCodes.AUTH_TOKEN_REJECTED,
                context={"reason": "token has no subject"}
            )
        return cls(uid=uid, email=claims.get("email"), claims=dict(claims))


def extract_bearer_token(authorization: Optional[str]) -> str:
    """从 Authorization 头提取令牌"""
    if not authorization:
        raise UnauthorizedError("Unauthorized access", ErrorCodes.AUTH_MISSING_HEADER)
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Unauthorized access", ErrorCodes.AUTH_MALFORMED_HEADER)

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Unauthorized access", ErrorCodes.AUTH_MALFORMED_HEADER)
    return token


class TokenVerifier:
    """令牌校验接口，子类实现 verify"""

    async def verify(self, token: str) -> Identity:
        raise NotImplementedError


class FirebaseTokenVerifier(TokenVerifier):
    """基于 firebase-admin 的令牌校验器"""

    def __init__(self, auth_config: Optional[AuthConfig] = None,
                 app: Optional[firebase_admin.App] = None):
        self.config = auth_config or config_manager.get_auth_config()
        self.app = app

    def initialize(self) -> firebase_admin.App:
        """初始化 Firebase 应用（进程内只初始化一次）"""
        if self.app is not None:
            return self.app

        try:
            self.app = firebase_admin.get_app()
            return self.app
        except ValueError:
            pass

        try:
            cred = credentials.Certificate(self.config.credentials_path)
        except (IOError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to load Firebase credentials from {self.config.credentials_path}: {e}",
                ErrorCodes.AUTH_PROVIDER_NOT_READY
            ) from e

        options = {"projectId": self.config.project_id} if self.config.project_id else None
        self.app = firebase_admin.initialize_app(cred, options)
        auth_logger.info("[Auth] Firebase app initialized")
        return self.app

    def _verify_sync(self, token: str) -> Dict[str, Any]:
        return firebase_auth.verify_id_token(
            token, app=self.app, check_revoked=self.config.check_revoked
        )

    async def verify(self, token: str) -> Identity:
        if self.app is None:
            raise ConfigurationError("Firebase app not initialized", ErrorCodes.AUTH_PROVIDER_NOT_READY)

        try:
            # SDK 调用是阻塞的（可能需要拉取公钥），放到线程池执行
            claims = await run_in_threadpool(self._verify_sync, token)
        except (ValueError, FirebaseError) as e:
            auth_logger.warning(f"[Auth] Token verification failed: {type(e).__name__}")
            raise ForbiddenError("Forbidden access", ErrorCodes.AUTH_TOKEN_REJECTED) from e

        return Identity.from_claims(claims)
