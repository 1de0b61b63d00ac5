# fintracker/main.py
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__, crud
from .auth import bearer_token, create_access_token, decode_access_token, hash_password, verify_password
from .config import Settings, get_settings
from .db import Database, get_db
from .errors import ApiError, install_exception_handlers, store_error_message
from .logging_utils import configure_root_logger, get_logger
from .middleware import HEALTH_PATH, install_middleware
from .schemas import (
    AuthResponse,
    ExpenseCreate,
    ExpenseOut,
    IncomeCreate,
    IncomeOut,
    LoginRequest,
    RegisterRequest,
    UserOut,
)

LOGGER = get_logger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_identity(request: Request, user_id: int) -> None:
    """When token binding is on, the bearer token's userId must be the one being acted for."""
    settings = get_app_settings(request)
    if not settings.enforce_token_identity:
        return
    token = bearer_token(request.headers.get("authorization"))
    if token is None:
        raise ApiError(401, "Missing bearer token")
    if decode_access_token(token, settings) != user_id:
        raise ApiError(403, "Token does not match userId")


def _store_failure(db: Session, tag: str, exc: SQLAlchemyError) -> ApiError:
    db.rollback()
    LOGGER.exception("[%s] Error", tag)
    return ApiError(500, store_error_message(exc))


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_root_logger(settings.log_level)

    owns_database = database is None
    if database is None:
        database = Database.from_settings(settings)

    app = FastAPI(title="FinTracker API", version=__version__)
    app.state.settings = settings
    app.state.database = database

    install_middleware(app, settings)
    install_exception_handlers(app)

    @app.on_event("startup")
    def on_startup():
        if settings.create_tables:
            database.create_all()
            LOGGER.info("Schema ensured")

    @app.on_event("shutdown")
    def on_shutdown():
        if owns_database:
            database.dispose()

    # ---------- Health ----------
    @app.get(HEALTH_PATH)
    def health():
        return {"ok": True}

    # ---------- Auth ----------
    @app.post("/register", response_model=AuthResponse)
    def register(payload: RegisterRequest, db: Session = Depends(get_db)):
        LOGGER.debug("[REGISTER] username=%s email=%s", payload.username, payload.email)
        password_hash = hash_password(payload.password, rounds=settings.bcrypt_rounds)

        try:
            user = crud.create_user(db, payload.username, password_hash, payload.email)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "REGISTER", exc)

        LOGGER.info("[REGISTER] Inserted user id=%s", user.id)
        token = create_access_token(user.id, settings)
        return AuthResponse(token=token, user=UserOut.model_validate(user))

    @app.post("/login", response_model=AuthResponse)
    def login(payload: LoginRequest, db: Session = Depends(get_db)):
        LOGGER.debug("[LOGIN] username=%s", payload.username)
        try:
            user = crud.get_user_by_username(db, payload.username)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "LOGIN", exc)

        if user is None:
            LOGGER.info("[LOGIN] User not found: %s", payload.username)
            raise ApiError(400, "User not found")

        if not verify_password(payload.password, user.password):
            LOGGER.info("[LOGIN] Incorrect password for user: %s", payload.username)
            raise ApiError(400, "Incorrect password")

        LOGGER.info("[LOGIN] Token issued for user id=%s", user.id)
        token = create_access_token(user.id, settings)
        return AuthResponse(token=token, user=UserOut.model_validate(user))

    # ---------- Income ----------
    @app.post("/income", response_model=IncomeOut)
    def add_income(payload: IncomeCreate, request: Request, db: Session = Depends(get_db)):
        require_identity(request, payload.user_id)
        try:
            income = crud.create_income(
                db,
                user_id=payload.user_id,
                amount=payload.amount,
                source=payload.source,
                date_value=payload.date,
                transaction_type=payload.transaction_type,
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, "INCOME:POST", exc)
        LOGGER.info("[INCOME:POST] Inserted income id=%s for user id=%s", income.id, income.user_id)
        return income

    @app.get("/income", response_model=List[IncomeOut])
    def get_income(request: Request, user_id: int = Query(..., alias="userId"), db: Session = Depends(get_db)):
        require_identity(request, user_id)
        try:
            rows = crud.list_income(db, user_id)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "INCOME:GET", exc)
        LOGGER.debug("[INCOME:GET] %s rows for user id=%s", len(rows), user_id)
        return rows

    # ---------- Expenses ----------
    @app.post("/expenses", response_model=ExpenseOut)
    def add_expense(payload: ExpenseCreate, request: Request, db: Session = Depends(get_db)):
        require_identity(request, payload.user_id)
        try:
            expense = crud.create_expense(
                db,
                user_id=payload.user_id,
                amount=payload.amount,
                category=payload.category,
                date_value=payload.date,
                transaction_type=payload.transaction_type,
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, "EXPENSES:POST", exc)
        LOGGER.info("[EXPENSES:POST] Inserted expense id=%s for user id=%s", expense.id, expense.user_id)
        return expense

    @app.get("/expenses", response_model=List[ExpenseOut])
    def get_expenses(request: Request, user_id: int = Query(..., alias="userId"), db: Session = Depends(get_db)):
        require_identity(request, user_id)
        try:
            rows = crud.list_expenses(db, user_id)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "EXPENSES:GET", exc)
        LOGGER.debug("[EXPENSES:GET] %s rows for user id=%s", len(rows), user_id)
        return rows

    return app
