from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from app.features.entries.schemas import WeeklyEntry


# ===========================
# STUDENT AGGREGATE SCHEMAS
# ===========================
class StudentSummary(BaseModel):
    user_id: str
    name: str = ""
    register_number: str = ""
    email: Optional[str] = None
    total_solved: int = 0
    entries_count: int = 0
    entries: List[WeeklyEntry] = []


# ===========================
# ADMIN REQUEST SCHEMAS
# ===========================
class RequestAction(str, Enum):
    approved = "approved"
    denied = "denied"


class AdminRequestOut(BaseModel):
    id: str
    user_id: str
    status: str = "pending"
    name: Optional[str] = None
    register_number: Optional[str] = None
    created_at: Optional[datetime] = None


class AdminRequestDecision(BaseModel):
    action: RequestAction = Field(..., example="approved")


class AdminRequestResult(BaseModel):
    id: str
    status: RequestAction
    role_granted: bool = False


# ===========================
# ACCOUNT SCHEMAS
# ===========================
class ResetPasswordRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=128)


class SuccessResponse(BaseModel):
    success: bool = True
