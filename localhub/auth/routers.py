import logging
import secrets

from fastapi import APIRouter, status, HTTPException, Depends
from supabase import AuthApiError, Client

from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_current_user_id, get_session_token
from localhub.core.permissions import fetch_roles, resolve_capabilities
from localhub.core.sessions import (
    create_session,
    deactivate_session,
    refresh_session,
    validate_session,
)
from localhub.utils.clock import isoformat, utcnow
from localhub.utils.profile_lookup import get_profile_summary
from .schemas import (
    UserRegistrationModel,
    UserRegistrationResponseModel,
    UserLoginModel,
    UserLoginResponseModel,
    LogoutResponseModel,
    SessionTokenModel,
    ValidateSessionResponseModel,
    RefreshSessionResponseModel,
    AdminValidateResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()

SESSION_USER_COLUMNS = "id, email, username, full_name, avatar_url"


@router.post("/register", response_model=UserRegistrationResponseModel, status_code=201)
def register_user(data: UserRegistrationModel, supabase: Client = Depends(get_supabase)):
    """
    Register a new user.

    This endpoint creates a Supabase Auth user and a corresponding profile record.
    The profile carries a one-time email verification token which is redeemed
    through `/profiles/verify-email`.

    **Input Fields**
    - **email**: A valid user email. Must not already exist in Supabase Auth.
    - **username**: 3–30 characters, containing only letters, numbers, underscores, or dots.
    - **password**: Minimum 8 characters with lower/upper case letters, a number
      and a special character.
    - **full_name**: Optional display name.

    **Returns**
    - User ID
    - Email
    - Username

    **Errors**
    - 400: Invalid input or failed to create user
    - 409: Email or Username already registered
    """
    # Check if username already exists
    username_check = (
        supabase.table("profiles").select("id").eq("username", data.username).execute()
    )

    if username_check.data:
        raise HTTPException(status_code=409, detail="Username already taken.")

    # Create Supabase Auth user
    try:
        res = supabase.auth.sign_up(
            {
                "email": data.email,
                "password": data.password.get_secret_value(),
            }
        )
    except AuthApiError as error:
        logger.error(f"supabase_error={error}")
        raise HTTPException(status_code=409, detail=str(error))

    if not res.user:
        raise HTTPException(status_code=400, detail="Failed to create user")

    user_id = str(res.user.id)

    supabase.table("profiles").insert(
        {
            "id": user_id,
            "username": data.username,
            "full_name": data.full_name,
            "email": data.email,
            "email_verification_token": secrets.token_urlsafe(32),
            "email_verification_sent_at": isoformat(utcnow()),
        }
    ).execute()

    logger.info(f"user_register_success user_id={user_id} username={data.username}")

    return {
        "id": user_id,
        "email": res.user.email,
        "username": data.username,
    }


@router.post("/login", response_model=UserLoginResponseModel, status_code=200)
def login_user(user_data: UserLoginModel, supabase: Client = Depends(get_supabase)):
    """
    Authenticate a user with email and password.

    Credentials are checked against Supabase Auth. On success an opaque
    session token is stored in `user_sessions` and returned; the client sends
    it back in the `x-session-token` header and keeps it alive through
    `/auth/session/refresh`.

    **Returns**
    - `user`: basic profile of the authenticated user
    - `session_token`: opaque session token
    - `expires_at`: when the session lapses unless refreshed

    **Errors**
    - 401: Invalid email or password
    - 500: Supabase or internal server error
    """
    try:
        res = supabase.auth.sign_in_with_password(
            {
                "email": user_data.email,
                "password": user_data.password.get_secret_value(),
            }
        )
    except AuthApiError as error:
        raise HTTPException(status_code=401, detail=error.message)

    if not res.user:
        raise HTTPException(
            status_code=500,
            detail="Supabase authentication returned an unexpected response.",
        )

    user_id = str(res.user.id)

    try:
        session = create_session(supabase, user_id)
        profile = get_profile_summary(supabase, user_id, SESSION_USER_COLUMNS) or {}
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"session_create_failed user_id={user_id}")
        raise HTTPException(
            status_code=500, detail="An internal server error occurred during login."
        )

    logger.info(f"user_login_success user_id={user_id}")

    return {
        "user": {**profile, "id": user_id, "email": res.user.email},
        "session_token": session["session_token"],
        "expires_at": session["expires_at"],
    }


@router.post("/logout", response_model=LogoutResponseModel)
def logout(
    token: str = Depends(get_session_token),
    supabase: Client = Depends(get_supabase),
):
    """
    Deactivate the session identified by the `x-session-token` header.

    Logging out an already inactive session is not an error; the client clears
    its stored session either way.
    """
    deactivated = deactivate_session(supabase, token)
    if deactivated:
        logger.info("user_logout_success")
    return {"logged_out": True}


@router.post("/session/validate", response_model=ValidateSessionResponseModel)
def validate(data: SessionTokenModel, supabase: Client = Depends(get_supabase)):
    """Resolve a session token to its user id; `null` when inactive or expired."""
    try:
        user_id = validate_session(supabase, data.session_token)
    except Exception:
        logger.exception("validate_session_failed")
        raise HTTPException(status_code=500, detail="Session validation failed")

    return {"user_id": user_id}


@router.post("/session/refresh", response_model=RefreshSessionResponseModel)
def refresh(data: SessionTokenModel, supabase: Client = Depends(get_supabase)):
    """Extend the lifetime of an active session."""
    try:
        expires_at = refresh_session(supabase, data.session_token)
    except Exception:
        logger.exception("refresh_session_failed")
        raise HTTPException(status_code=500, detail="Session refresh failed")

    return {"refreshed": expires_at is not None, "expires_at": expires_at}


@router.post("/admin/validate", response_model=AdminValidateResponseModel)
def admin_validate(
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Validate an admin panel session.

    **Returns**
    - `user`: the admin's profile summary
    - `roles`: raw role labels from `user_roles`
    - `capabilities`: effective roles after `super_admin` expansion

    **Errors**
    - 401: Missing, invalid or expired session
    - 403: The user holds no admin role
    """
    roles = fetch_roles(supabase, user_id)
    capabilities = resolve_capabilities(roles)

    if not capabilities:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: No admin roles",
        )

    profile = get_profile_summary(supabase, user_id, SESSION_USER_COLUMNS) or {}

    return {
        "success": True,
        "user": {**profile, "id": user_id},
        "roles": roles,
        "capabilities": sorted(role.value for role in capabilities),
    }
