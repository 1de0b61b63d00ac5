# fintracker/crud.py
from datetime import date
from typing import List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models

RecordT = TypeVar("RecordT", models.Income, models.Expense)


# ---------- Users ----------
def create_user(db: Session, username: str, password_hash: str, email: Optional[str] = None) -> models.User:
    user = models.User(username=username, password=password_hash, email=email)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    return db.execute(
        select(models.User).where(models.User.username == username)
    ).scalar_one_or_none()


# ---------- Income / expenses ----------
def _create_record(db: Session, model: Type[RecordT], **fields) -> RecordT:
    obj = model(**fields)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def _list_records(db: Session, model: Type[RecordT], user_id: int) -> List[RecordT]:
    # no ORDER BY: rows come back in whatever order the store yields them
    return list(db.execute(select(model).where(model.user_id == user_id)).scalars().all())


def create_income(
    db: Session,
    user_id: int,
    amount: float,
    source: Optional[str] = None,
    date_value: Optional[date] = None,
    transaction_type: Optional[str] = None,
) -> models.Income:
    return _create_record(
        db,
        models.Income,
        user_id=user_id,
        amount=amount,
        source=source,
        date=date_value,
        transaction_type=transaction_type,
    )


def list_income(db: Session, user_id: int) -> List[models.Income]:
    return _list_records(db, models.Income, user_id)


def create_expense(
    db: Session,
    user_id: int,
    amount: float,
    category: Optional[str] = None,
    date_value: Optional[date] = None,
    transaction_type: Optional[str] = None,
) -> models.Expense:
    return _create_record(
        db,
        models.Expense,
        user_id=user_id,
        amount=amount,
        category=category,
        date=date_value,
        transaction_type=transaction_type,
    )


def list_expenses(db: Session, user_id: int) -> List[models.Expense]:
    return _list_records(db, models.Expense, user_id)
