# app/schemas/common.py
from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    ok: bool = False
    success: bool = False
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    database: str
    error: Optional[str] = None
