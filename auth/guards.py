"""
Request guard pipeline.
Ordered guards evaluated before a handler body; each guard allows the
request or denies it with an error from the service taxonomy.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from utils import auth_logger, QuoteServiceError, ForbiddenError, ErrorCodes
from .verifier import Identity, TokenVerifier, extract_bearer_token


@dataclass
class GuardDecision:
    """守卫判定结果"""
    allowed: bool
    error: Optional[QuoteServiceError] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: QuoteServiceError) -> "GuardDecision":
        return cls(allowed=False, error=error)


@dataclass
class RequestContext:
    """守卫可见的请求信息，与具体Web框架无关"""
    headers: Mapping[str, str]
    path_params: Mapping[str, Any] = field(default_factory=dict)
    identity: Optional[Identity] = None

    @property
    def authorization(self) -> Optional[str]:
        # Starlette 的 Headers 已经大小写无关，普通 dict 需要兼容两种写法
        return self.headers.get("authorization") or self.headers.get("Authorization")


class Guard:
    """守卫基类"""

    name = "guard"

    async def check(self, context: RequestContext) -> GuardDecision:
        raise NotImplementedError


class BearerTokenGuard(Guard):
    """校验 Bearer 令牌，并把解码后的身份写入上下文"""

    name = "bearer_token"

    def __init__(self, verifier: TokenVerifier):
        self.verifier = verifier

    async def check(self, context: RequestContext) -> GuardDecision:
        try:
            token = extract_bearer_token(context.authorization)
            context.identity = await self.verifier.verify(token)
        except QuoteServiceError as e:
            return GuardDecision.deny(e)
        return GuardDecision.allow()


class OwnershipGuard(Guard):
    """比较身份邮箱与路径参数（大小写敏感的精确匹配）"""

    name = "ownership"

    def __init__(self, path_param: str = "email", claim: str = "email"):
        self.path_param = path_param
        self.claim = claim

    async def check(self, context: RequestContext) -> GuardDecision:
        identity = context.identity
        if identity is None:
            return GuardDecision.deny(ForbiddenError("Forbidden access", ErrorCodes.AUTH_OWNERSHIP_MISMATCH))

        claimed = identity.email if self.claim == "email" else identity.claims.get(self.claim)
        requested = context.path_params.get(self.path_param)
        if claimed is None or claimed != requested:
            return GuardDecision.deny(ForbiddenError(
                "Forbidden access",
                ErrorCodes.AUTH_OWNERSHIP_MISMATCH,
                context={"param": self.path_param}
            ))
        return GuardDecision.allow()


class GuardPipeline:
    """按顺序执行守卫，遇到第一个拒绝即停止"""

    def __init__(self, guards: Sequence[Guard]):
        self.guards = list(guards)

    async def evaluate(self, context: RequestContext) -> RequestContext:
        for guard in self.guards:
            decision = await guard.check(context)
            if not decision.allowed:
                auth_logger.info(f"[Auth] Request denied by {guard.name}: {decision.error.error_code}")
                raise decision.error
        return context
