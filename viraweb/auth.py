import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import SUPABASE_AUTH_COOKIE, SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .error_messages import NOT_AUTHENTICATED
from .models import User
from .security_middleware import set_rls_context

logger = logging.getLogger(__name__)

# auto_error=False so the cookie session can be used when no header is sent
security = HTTPBearer(auto_error=False)


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token (HS256, signed with the project's JWT secret).
    Returns the decoded claims.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Supabase not configured")

    try:
        claims = jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        logger.info("ℹ️ Expired Supabase token received")
        raise HTTPException(
            status_code=401,
            detail="Sessão expirada. Faça login novamente.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Supabase token verification failed: {e}")
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED) from e

    if not claims.get("sub"):
        logger.error(f"❌ Token missing sub claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED)

    return claims


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the Supabase session cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SUPABASE_AUTH_COOKIE)


def get_or_create_user(
    db: Session, supabase_uid: str, email: Optional[str], name: str = ""
) -> tuple[User, bool]:
    """Find the local user for a Supabase identity, creating it on first login.
    Returns (user, created)."""
    user = db.query(User).filter(User.supabase_uid == supabase_uid).first()
    if user:
        return user, False

    # Same email under a new identity (e.g. password signup then Google OAuth)
    if email:
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            logger.info(
                f"🔄 Migrating user {email} from Supabase UID {existing_user.supabase_uid} to {supabase_uid}"
            )
            existing_user.supabase_uid = supabase_uid
            if name and not existing_user.full_name:
                existing_user.full_name = name
            db.commit()
            db.refresh(existing_user)
            return existing_user, False

    logger.info(f"🆕 Creating new user: {email}")
    user = User(supabase_uid=supabase_uid, email=email or f"{supabase_uid}@users.viraweb", full_name=name)
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
        logger.info(f"✅ New user created: {user.email}")
    except IntegrityError as e:
        db.rollback()
        # Another request created the same user between the lookup and the insert
        user = db.query(User).filter(User.supabase_uid == supabase_uid).first()
        if not user:
            logger.error(f"❌ Email {email} is already registered to another account")
            raise HTTPException(
                status_code=409,
                detail="Este email já está cadastrado. Entre com sua conta existente.",
            ) from e
        return user, False
    return user, True


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the Supabase session token"""
    token = extract_token(request, credentials)
    if not token:
        logger.debug(f"No session token for {request.url.path}")
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED)

    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED)

    claims = verify_supabase_token(token)
    metadata = claims.get("user_metadata") or {}
    user, created = get_or_create_user(
        db,
        supabase_uid=claims["sub"],
        email=claims.get("email"),
        name=metadata.get("full_name") or metadata.get("name") or "",
    )

    if created and user.email:
        from .worker import enqueue_welcome_email

        await enqueue_welcome_email(user.id)

    # Keep the raw token around for calls that must act as the user (Supabase Auth)
    request.state.access_token = token

    set_rls_context(db, user.id)
    logger.debug(f"✅ User authenticated: {user.email}")
    return user
