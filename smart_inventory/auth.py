"""
Email / password login and bearer-token sessions.

Demo accounts (constants.DEMO_USERS) are checked first when enabled, then
registered users whose passwords are stored as bcrypt hashes. A successful
login issues an opaque token stored in session_tokens; it expires after
SESSION_TOKEN_EXPIRY_HOURS and is revoked on logout.
"""

import datetime
import logging
import secrets
from typing import Callable, Optional

import bcrypt
from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session

from . import models, schemas
from .config import settings
from .constants import DEMO_USERS, Messages, Role
from .context import AppContext, get_context
from .database import get_db
from .exceptions import AuthenticationException, PermissionDeniedException, ValidationException
from .middleware.rate_limit import limiter
from .permissions import CurrentUser, can_manage_priorities, display_name_for

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("Auth")


# ─── Passwords ────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the DB
        return False


# ─── Sessions ─────────────────────────────────────────────

def authenticate(db: Session, email: str, password: str, ctx: AppContext) -> CurrentUser:
    email = email.strip().lower()

    demo = DEMO_USERS.get(email) if settings.DEMO_USERS_ENABLED else None
    if demo is not None:
        if not secrets.compare_digest(password.encode("utf-8"), demo["password"].encode("utf-8")):
            raise AuthenticationException(Messages.INVALID_CREDENTIALS)
        return CurrentUser(email=email, role=ctx.roles.role_for(email), display_name=display_name_for(email))

    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationException(Messages.INVALID_CREDENTIALS)

    return CurrentUser(
        email=user.email,
        role=Role(user.role),
        display_name=user.display_name or display_name_for(user.email),
        user_id=user.id,
    )


def issue_token(db: Session, user: CurrentUser) -> models.SessionToken:
    now = datetime.datetime.utcnow()
    session = models.SessionToken(
        token=secrets.token_urlsafe(32),
        email=user.email,
        role=user.role.value,
        created_at=now,
        expires_at=now + datetime.timedelta(hours=settings.SESSION_TOKEN_EXPIRY_HOURS),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    user.token = session.token
    return session


def resolve_token(db: Session, token: str) -> CurrentUser:
    session = db.query(models.SessionToken).filter(models.SessionToken.token == token).first()
    if session is None or session.revoked_at is not None:
        raise AuthenticationException(Messages.UNAUTHORIZED)
    if session.expires_at < datetime.datetime.utcnow():
        raise AuthenticationException(Messages.TOKEN_EXPIRED)

    user = db.query(models.User).filter(models.User.email == session.email).first()
    return CurrentUser(
        email=session.email,
        role=Role(session.role),
        display_name=(user.display_name if user and user.display_name else display_name_for(session.email)),
        user_id=user.id if user else None,
        token=token,
    )


def revoke_token(db: Session, token: str):
    session = db.query(models.SessionToken).filter(models.SessionToken.token == token).first()
    if session is not None and session.revoked_at is None:
        session.revoked_at = datetime.datetime.utcnow()
        db.commit()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# ─── Dependencies ─────────────────────────────────────────

async def get_current_user(
    authorization: str = Header(None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Dependency: a valid, unexpired bearer token."""
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationException(Messages.UNAUTHORIZED)
    return resolve_token(db, token)


async def get_optional_user(
    authorization: str = Header(None),
    db: Session = Depends(get_db),
) -> Optional[CurrentUser]:
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        return resolve_token(db, token)
    except AuthenticationException:
        return None


def require(predicate: Callable[[Optional[CurrentUser]], bool], message: str = Messages.FORBIDDEN):
    """
    Dependency factory gating a route on a permission predicate.

        @router.delete("/{item_id}")
        def delete(user: CurrentUser = Depends(require(can_manage_products, Messages.MANAGER_REQUIRED))):
    """
    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not predicate(user):
            logger.warning(f"Permission denied for {user.email} ({user.role.value}): {predicate.__name__}")
            raise PermissionDeniedException(message)
        return user

    return dependency


# ─── Routes ───────────────────────────────────────────────

@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: schemas.LoginRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    user = authenticate(db, payload.email, payload.password, ctx)
    session = issue_token(db, user)
    logger.info(f"Login: {user.email} ({user.role.value})")
    return {
        "success": True,
        "message": Messages.LOGIN,
        "data": {
            "token": session.token,
            "expiresAt": session.expires_at.isoformat(),
            "user": user.to_profile(),
        },
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: schemas.RegisterRequest,
    db: Session = Depends(get_db),
    caller: Optional[CurrentUser] = Depends(get_optional_user),
):
    """
    Create an account. Anyone may register as staff; creating a manager or
    admin account needs an admin token.
    """
    email = payload.email.strip().lower()
    if "@" not in email:
        raise ValidationException("Invalid email address")
    if payload.role != Role.STAFF and not can_manage_priorities(caller):
        raise PermissionDeniedException(Messages.ADMIN_REQUIRED)
    if email in DEMO_USERS or db.query(models.User).filter(models.User.email == email).first():
        raise ValidationException("Email already registered")

    user = models.User(
        email=email,
        password_hash=hash_password(payload.password),
        display_name=payload.display_name or display_name_for(email),
        role=payload.role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered {user.email} as {user.role}")

    profile = schemas.UserProfile(id=user.id, email=user.email, role=Role(user.role), display_name=user.display_name)
    return {"success": True, "message": Messages.CREATED, "data": profile.dump()}


@router.get("/me")
async def me(user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": user.to_profile()}


@router.post("/logout")
async def logout(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    revoke_token(db, user.token)
    logger.info(f"Logout: {user.email}")
    return {"success": True, "message": Messages.LOGOUT}
