"""
API routes for the quote service.
Each handler runs the guard pipeline, issues one logical unit of store work
and serializes the result.
"""

from typing import List, Dict, Any
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from auth import Identity
from database.models import (
    QuoteStatus, SUBMITTED_BY_FIELD, STATUS_FIELD, LIKE_COUNT_FIELD,
    LEGACY_AUTHOR_FIELD, ADMIN_EMAIL_FIELD,
    build_new_quote, approval_patch, rejection_patch, is_approved,
)
from utils import (
    api_logger, utc_now, NotFoundError, InvalidOperationError, InvalidRequestBodyError, ErrorCodes,
)
from .dependencies import (
    QuoteServices, get_services, require_token, require_email_owner,
    serialize, insert_ack, delete_ack, read_json_object,
)
from .models import (
    RejectQuoteRequest, InsertResultResponse, DeleteResultResponse, AdminCheckResponse, MessageResponse,
)

# 错误响应统一为 {"message": ...}
router = APIRouter(responses={
    status: {"model": MessageResponse} for status in (400, 401, 403, 404, 500)
})

QUOTE_NOT_FOUND = "Quote not found"
QUOTE_NOT_OWNED = "Quote not found or you don't have permission to delete it"
APPROVED_NOT_DELETABLE = "Approved quotes cannot be deleted"


def _quote_not_found(quote_id: str, message: str = QUOTE_NOT_FOUND,
                     error_code: str = ErrorCodes.QUOTE_NOT_FOUND) -> NotFoundError:
    return NotFoundError(message, error_code, context={"id": quote_id})


# Quote Submission
@router.post("/add-quote", response_model=InsertResultResponse, tags=["Quotes"])
async def add_quote(
    request: Request,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """提交名言，状态固定为 pending"""
    quote = await read_json_object(request)
    document = build_new_quote(quote, submitted_by=identity.uid, created_at=utc_now())
    inserted_id = await services.quotes.insert(document)
    api_logger.info(f"[API] Quote {inserted_id} submitted by {identity.uid}")
    return insert_ack(inserted_id)


@router.get("/quotes", response_model=List[Dict[str, Any]], tags=["Quotes"])
async def get_quotes(
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """获取全部名言"""
    return serialize(await services.quotes.find_all())


@router.get("/quotes/{quote_id}", response_model=Dict[str, Any], tags=["Quotes"])
async def get_quote_by_id(
    quote_id: str,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """根据ID获取名言"""
    quote = await services.quotes.find_by_id(quote_id)
    if quote is None:
        raise _quote_not_found(quote_id)
    return serialize(quote)


@router.get("/my-quotes", response_model=List[Dict[str, Any]], tags=["Quotes"])
async def get_my_quotes(
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """获取当前用户提交的名言"""
    return serialize(await services.quotes.find_by_filter({SUBMITTED_BY_FIELD: identity.uid}))


@router.get("/get-posted-quotes/{email}", response_model=List[Dict[str, Any]], tags=["Quotes"])
async def get_posted_quotes(
    email: str,
    identity: Identity = Depends(require_email_owner),
    services: QuoteServices = Depends(get_services)
):
    """按提交人邮箱获取名言"""
    # 旧接口按 addBy 过滤，新提交的文档只写 submitted_by，因此只能查到旧数据
    return serialize(await services.quotes.find_by_filter({LEGACY_AUTHOR_FIELD: email}))


# Moderation Queues
@router.get("/pending-quotes", response_model=List[Dict[str, Any]], tags=["Moderation"])
async def get_pending_quotes(
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """获取待审核名言"""
    return serialize(await services.quotes.find_by_filter({STATUS_FIELD: QuoteStatus.PENDING.value}))


@router.get("/approved-quotes", response_model=List[Dict[str, Any]], tags=["Moderation"])
async def get_approved_quotes(services: QuoteServices = Depends(get_services)):
    """获取已通过名言（公开接口）"""
    return serialize(await services.quotes.find_by_filter({STATUS_FIELD: QuoteStatus.APPROVED.value}))


@router.get("/rejected-quotes", response_model=List[Dict[str, Any]], tags=["Moderation"])
async def get_rejected_quotes(
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """获取已拒绝名言"""
    return serialize(await services.quotes.find_by_filter({STATUS_FIELD: QuoteStatus.REJECTED.value}))


@router.patch("/approve-quote/{quote_id}", response_model=Dict[str, Any], tags=["Moderation"])
async def approve_quote(
    quote_id: str,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """审核通过"""
    updated = await services.quotes.update_by_id(quote_id, set_fields=approval_patch(utc_now()))
    if updated is None:
        raise _quote_not_found(quote_id)
    api_logger.info(f"[API] Quote {quote_id} approved by {identity.uid}")
    return serialize(updated)


@router.patch("/reject-quote/{quote_id}", response_model=Dict[str, Any], tags=["Moderation"])
async def reject_quote(
    quote_id: str,
    request: Request,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """审核拒绝，可附带原因"""
    try:
        payload = RejectQuoteRequest.model_validate(await read_json_object(request))
    except ValidationError as e:
        raise InvalidRequestBodyError(
            "Invalid request body", ErrorCodes.REQUEST_INVALID_BODY, context={"id": quote_id}
        ) from e
    notes = payload.notes
    updated = await services.quotes.update_by_id(quote_id, set_fields=rejection_patch(utc_now(), notes or None))
    if updated is None:
        raise _quote_not_found(quote_id)
    api_logger.info(f"[API] Quote {quote_id} rejected by {identity.uid}")
    return serialize(updated)


@router.get("/check-admin", response_model=AdminCheckResponse, tags=["Moderation"])
async def check_admin(
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """检查管理员标记是否存在"""
    marker = await services.admins.find_one({ADMIN_EMAIL_FIELD: services.admin_email})
    return {"isAdmin": marker is not None}


# Likes
@router.patch("/increase-like-count/{quote_id}", response_model=Dict[str, Any], tags=["Likes"])
async def increase_like_count(
    quote_id: str,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """点赞数加一"""
    updated = await services.quotes.update_by_id(quote_id, inc_fields={LIKE_COUNT_FIELD: 1})
    if updated is None:
        raise _quote_not_found(quote_id)
    return serialize(updated)


@router.patch("/decrease-like-count/{quote_id}", response_model=Dict[str, Any], tags=["Likes"])
async def decrease_like_count(
    quote_id: str,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """点赞数减一"""
    updated = await services.quotes.update_by_id(quote_id, inc_fields={LIKE_COUNT_FIELD: -1})
    if updated is None:
        raise _quote_not_found(quote_id)
    return serialize(updated)


# Deletion
@router.delete("/remove-quote/{quote_id}", response_model=DeleteResultResponse, tags=["Deletion"])
async def remove_quote(
    quote_id: str,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """无条件删除（管理操作）"""
    deleted_count = await services.quotes.delete_by_id(quote_id)
    api_logger.info(f"[API] remove-quote {quote_id} by {identity.uid}: deleted={deleted_count}")
    return delete_ack(deleted_count)


@router.delete("/delete-my-quote/{quote_id}", response_model=DeleteResultResponse, tags=["Deletion"])
async def delete_my_quote(
    quote_id: str,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """删除自己提交的名言，已通过的不可删除"""
    owner_filter = {SUBMITTED_BY_FIELD: identity.uid}

    # 先查后删不是原子操作；删除本身仍按提交人过滤
    quote = await services.quotes.find_by_id(quote_id, extra_filter=owner_filter)
    if quote is None:
        raise _quote_not_found(quote_id, QUOTE_NOT_OWNED, ErrorCodes.QUOTE_NOT_OWNED)
    if is_approved(quote):
        raise InvalidOperationError(
            APPROVED_NOT_DELETABLE,
            ErrorCodes.QUOTE_ALREADY_APPROVED,
            context={"id": quote_id}
        )

    deleted_count = await services.quotes.delete_by_id(quote_id, extra_filter=owner_filter)
    return delete_ack(deleted_count)


# Enrollment
@router.post("/enroll", response_model=InsertResultResponse, tags=["Enrollment"])
async def enroll(
    request: Request,
    identity: Identity = Depends(require_token),
    services: QuoteServices = Depends(get_services)
):
    """写入报名集合"""
    item = await read_json_object(request)
    inserted_id = await services.enrollments.insert(item)
    return insert_ack(inserted_id)
