import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..error_messages import action_failure
from ..rate_limiter import create_rate_limiter
from ..supabase_auth import SupabaseAuthError, supabase_auth

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


# Rate limiters
rate_limit_password_reset = create_rate_limiter(
    limit=5,
    window_seconds=3600,  # 1 hour
    key_prefix="password_reset",
    use_ip=True,
)


@router.post("/forgot-password")
async def forgot_password(
    data: ForgotPasswordRequest,
    _: None = Depends(rate_limit_password_reset),
):
    """Send a Supabase password recovery email - Rate limited to 5 requests per hour per IP"""
    email = (data.email or "").strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail=action_failure("auth.email_required"))

    if not supabase_auth.is_configured():
        logger.error("❌ Supabase Auth not configured")
        raise HTTPException(status_code=500, detail=action_failure("auth.not_configured"))

    try:
        # Only possible with the service role key; otherwise Supabase answers
        # the same way for known and unknown addresses
        if supabase_auth.has_admin_access() and not await supabase_auth.user_exists(email):
            logger.info(f"Password recovery requested for unknown email: {email}")
            raise HTTPException(status_code=404, detail=action_failure("auth.user_not_found"))

        await supabase_auth.send_password_recovery(email)
    except SupabaseAuthError as e:
        logger.error(f"❌ Password recovery failed for {email}: {e.message}")
        raise HTTPException(
            status_code=400, detail=action_failure("auth.recovery_failed")
        ) from e

    return {"message": "Email de recuperação enviado com sucesso"}


@router.post("/reset-password")
async def reset_password(
    data: ResetPasswordRequest,
    _: None = Depends(rate_limit_password_reset),
):
    """Set a new password using the recovery access token from the email link"""
    if not data.token or not data.password:
        raise HTTPException(
            status_code=400, detail=action_failure("auth.token_password_required")
        )

    if not supabase_auth.is_configured():
        logger.error("❌ Supabase Auth not configured")
        raise HTTPException(status_code=500, detail=action_failure("auth.not_configured"))

    try:
        await supabase_auth.update_user(data.token, password=data.password)
    except SupabaseAuthError as e:
        logger.error(f"❌ Password reset failed: {e.message}")
        raise HTTPException(status_code=400, detail=action_failure("auth.reset_failed")) from e

    logger.info("✅ Password reset completed")
    return {"message": "Senha redefinida com sucesso"}
