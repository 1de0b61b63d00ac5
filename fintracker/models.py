# fintracker/models.py
from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    # bcrypt hash, never the plain secret
    password = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)

    income = relationship("Income", back_populates="user")
    expenses = relationship("Expense", back_populates="user")


class Income(Base):
    __tablename__ = "income"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    source = Column(String(100), nullable=True)
    date = Column(Date, nullable=True)
    transaction_type = Column(String(30), nullable=True)

    user = relationship("User", back_populates="income")


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    category = Column(String(100), nullable=True)
    date = Column(Date, nullable=True)
    transaction_type = Column(String(30), nullable=True)

    user = relationship("User", back_populates="expenses")
