# fintracker/schemas.py
import datetime as dt
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------- Requests (camelCase keys, as the frontend sends them) ----------
class RegisterRequest(BaseModel):
    username: str
    password: str
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class _RecordCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    amount: float
    # browsers send toISOString() timestamps; the column keeps only the day
    date: Optional[Union[dt.datetime, dt.date]] = None
    transaction_type: Optional[str] = Field(None, alias="transactionType")

    @field_validator("date")
    @classmethod
    def _to_calendar_day(cls, value):
        if isinstance(value, dt.datetime):
            return value.date()
        return value


class IncomeCreate(_RecordCreate):
    source: Optional[str] = None


class ExpenseCreate(_RecordCreate):
    category: Optional[str] = None


# ---------- Responses (column names, as the store returns them) ----------
class UserOut(BaseModel):
    """Public view of a user; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: UserOut


class IncomeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: float
    source: Optional[str] = None
    date: Optional[dt.date] = None
    transaction_type: Optional[str] = None


class ExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: float
    category: Optional[str] = None
    date: Optional[dt.date] = None
    transaction_type: Optional[str] = None
