"""
Document models for the quote service.
Field names and helpers for quote documents stored in MongoDB.
"""

from enum import Enum
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from bson import ObjectId

from utils import InvalidIdError, ErrorCodes


class QuoteStatus(str, Enum):
    """审核状态"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# 文档字段名
ID_FIELD = "_id"
STATUS_FIELD = "status"
SUBMITTED_BY_FIELD = "submitted_by"
CREATED_AT_FIELD = "createdAt"
APPROVED_AT_FIELD = "approvedAt"
REJECTED_AT_FIELD = "rejectedAt"
REJECTION_NOTES_FIELD = "rejectionNotes"
LIKE_COUNT_FIELD = "added"
# 旧版本的提交人字段，新文档不再写入
LEGACY_AUTHOR_FIELD = "addBy"

# 管理员标记文档的键字段
ADMIN_EMAIL_FIELD = "email"


def parse_object_id(value: Any) -> ObjectId:
    """解析文档ID，格式不合法时抛出 InvalidIdError"""
    if isinstance(value, ObjectId):
        return value
    # ObjectId(None) 会生成新ID，必须先拒绝
    if value is None or not ObjectId.is_valid(value):
        raise InvalidIdError(
            "Invalid quote id",
            ErrorCodes.DB_INVALID_ID,
            context={"id": str(value)}
        )
    return ObjectId(value)


def build_new_quote(payload: Mapping[str, Any], submitted_by: str, created_at: datetime) -> Dict[str, Any]:
    """
    Build a quote document for insertion.

    Client fields pass through unchanged except the server-stamped ones,
    which always win. A client-supplied ``_id`` is dropped so the store
    assigns the identifier.
    """
    document = {k: v for k, v in payload.items() if k != ID_FIELD}
    document[STATUS_FIELD] = QuoteStatus.PENDING.value
    document[SUBMITTED_BY_FIELD] = submitted_by
    document[CREATED_AT_FIELD] = created_at
    return document


def approval_patch(approved_at: datetime) -> Dict[str, Any]:
    """审核通过时写入的字段"""
    return {
        STATUS_FIELD: QuoteStatus.APPROVED.value,
        APPROVED_AT_FIELD: approved_at,
    }


def rejection_patch(rejected_at: datetime, notes: Optional[str]) -> Dict[str, Any]:
    """审核拒绝时写入的字段"""
    return {
        STATUS_FIELD: QuoteStatus.REJECTED.value,
        REJECTED_AT_FIELD: rejected_at,
        REJECTION_NOTES_FIELD: notes,
    }


def is_approved(document: Mapping[str, Any]) -> bool:
    return document.get(STATUS_FIELD) == QuoteStatus.APPROVED.value
