import logging
from datetime import timedelta

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core import config
from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_current_user_id
from localhub.core.errors import is_unique_violation
from localhub.utils.clock import parse_timestamp, utcnow

from .schemas import UpdateProfileModel, VerifyEmailModel, VerifyEmailResponseModel


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/update", status_code=200)
def update_profile(
    data: UpdateProfileModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Update the caller's own profile.

    Only whitelisted columns are written; anything else in the body is ignored.

    **Errors**
    - 400: No updatable field supplied
    - 401: Missing, invalid or expired session
    - 409: Username already taken
    - 500: Database error
    """
    updates = data.updates()
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        result = supabase.table("profiles").update(updates).eq("id", user_id).execute()
    except Exception as error:
        if is_unique_violation(error):
            raise HTTPException(status_code=409, detail="Username already taken.")
        logger.exception(f"profile_update_failed user_id={user_id}")
        raise HTTPException(status_code=500, detail="Failed to update profile")

    if not result.data:
        raise HTTPException(status_code=404, detail="Profile not found")

    logger.info(f"profile_updated user_id={user_id} fields={sorted(updates)}")
    return {"success": True, "profile": result.data[0]}


@router.post("/verify-email", response_model=VerifyEmailResponseModel, status_code=200)
def verify_email(data: VerifyEmailModel, supabase: Client = Depends(get_supabase)):
    """
    Redeem an email verification token.

    Tokens are single use and expire EMAIL_VERIFICATION_TTL_HOURS after they
    were sent. A verified profile gets both `email_verified` and `is_verified`.
    """
    token = data.token.strip()
    if not token:
        raise HTTPException(status_code=400, detail="Verification token is required")

    try:
        lookup = (
            supabase.table("profiles")
            .select("id, email_verification_token, email_verification_sent_at")
            .eq("email_verification_token", token)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("verify_email_lookup_failed")
        raise HTTPException(status_code=500, detail="Failed to verify email")

    if not lookup.data:
        raise HTTPException(
            status_code=400, detail="Invalid or expired verification token"
        )

    profile = lookup.data[0]

    sent_at = parse_timestamp(profile.get("email_verification_sent_at"))
    ttl = timedelta(hours=config.EMAIL_VERIFICATION_TTL_HOURS)
    if sent_at and utcnow() - sent_at > ttl:
        raise HTTPException(
            status_code=400,
            detail="Verification token has expired. Please request a new one.",
        )

    try:
        supabase.table("profiles").update(
            {
                "email_verified": True,
                "is_verified": True,
                "email_verification_token": None,
            }
        ).eq("id", profile["id"]).execute()
    except Exception:
        logger.exception(f"verify_email_update_failed user_id={profile['id']}")
        raise HTTPException(status_code=500, detail="Failed to verify email")

    logger.info(f"email_verified user_id={profile['id']}")
    return {"success": True, "message": "Email verified successfully"}
