"""
API data models for the quote service.
Pydantic models for request/response validation.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class RejectQuoteRequest(BaseModel):
    """拒绝审核请求体"""
    model_config = ConfigDict(extra="ignore")

    notes: Optional[str] = Field(None, description="拒绝原因")


class InsertResultResponse(BaseModel):
    """插入结果"""
    acknowledged: bool = Field(True, description="写入是否被确认")
    insertedId: str = Field(..., description="存储分配的文档ID")


class DeleteResultResponse(BaseModel):
    """删除结果"""
    acknowledged: bool = Field(True, description="删除是否被确认")
    deletedCount: int = Field(..., description="删除的文档数量", ge=0, le=1)


class AdminCheckResponse(BaseModel):
    """管理员检查结果"""
    isAdmin: bool = Field(..., description="管理员标记是否存在")


class MessageResponse(BaseModel):
    """错误响应"""
    message: str = Field(..., description="错误信息")


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str
    timestamp: datetime
    version: str
