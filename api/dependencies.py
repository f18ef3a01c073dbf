"""
FastAPI dependencies for the quote service.
Binds the guard pipeline and the process-scoped store adapters to request handlers.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Request
from fastapi.encoders import jsonable_encoder

from auth import BearerTokenGuard, GuardPipeline, Identity, OwnershipGuard, RequestContext
from database import DocumentStore, MongoManager
from utils import AuthConfig, StoreError, InvalidRequestBodyError, ErrorCodes, to_iso


@dataclass
class QuoteServices:
    """请求处理所需的存储适配器集合"""
    quotes: DocumentStore
    admins: DocumentStore
    enrollments: DocumentStore
    admin_email: str

    @classmethod
    def build(cls, mongo: MongoManager, auth_config: AuthConfig) -> "QuoteServices":
        db_config = mongo.config
        return cls(
            quotes=DocumentStore(mongo, db_config.quotes_collection, db_config.database_name),
            admins=DocumentStore(mongo, db_config.admins_collection, db_config.database_name),
            enrollments=DocumentStore(mongo, db_config.enroll_collection, db_config.enroll_database),
            admin_email=auth_config.admin_email,
        )


def get_services(request: Request) -> QuoteServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise StoreError("Database not initialized", ErrorCodes.DB_CONNECTION_FAILED)
    return services


def guarded(ownership_param: Optional[str] = None):
    """生成执行守卫流水线的依赖，返回已验证身份"""

    async def dependency(request: Request) -> Identity:
        guards = [BearerTokenGuard(request.app.state.token_verifier)]
        if ownership_param:
            guards.append(OwnershipGuard(path_param=ownership_param))

        context = RequestContext(headers=request.headers, path_params=request.path_params)
        await GuardPipeline(guards).evaluate(context)
        return context.identity

    return dependency


require_token = guarded()
require_email_owner = guarded(ownership_param="email")


def serialize(value: Any) -> Any:
    """将存储结果转换为可JSON序列化的结构"""
    return jsonable_encoder(value, custom_encoder={ObjectId: str, datetime: to_iso})


def insert_ack(inserted_id: str) -> Dict[str, Any]:
    return {"acknowledged": True, "insertedId": inserted_id}


def delete_ack(deleted_count: int) -> Dict[str, Any]:
    return {"acknowledged": True, "deletedCount": deleted_count}


async def read_json_object(request: Request) -> Dict[str, Any]:
    """
    Decode the request body as a JSON object.

    Handlers call this after the guard dependencies have resolved, so an
    unauthenticated request is rejected before its body is looked at.
    An empty body reads as ``{}``; anything other than a JSON object is a
    400.
    """
    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidRequestBodyError(
            "Invalid request body",
            ErrorCodes.REQUEST_INVALID_BODY,
            context={"path": request.url.path}
        ) from e

    if not isinstance(payload, dict):
        raise InvalidRequestBodyError(
            "Invalid request body",
            ErrorCodes.REQUEST_INVALID_BODY,
            context={"path": request.url.path, "type": type(payload).__name__}
        )
    return payload
