import logging
from datetime import timedelta

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
from supabase import Client

from localhub.core import config
from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_current_user_id, authorize_admin
from localhub.core.permissions import Role
from localhub.utils.clock import isoformat, utcnow
from localhub.utils.profile_lookup import get_profile_summary

from .schemas import (
    AccountDeletionRequest,
    RequestDeletionAction,
    CancelDeletionAction,
    GetStatusAction,
    GetAllPendingAction,
    AdminDeleteAction,
)


logger = logging.getLogger(__name__)
router = APIRouter()

REQUESTS_TABLE = "account_deletion_requests"
DELETION_ADMIN_ROLES = (Role.SUPER_ADMIN, Role.CONTENT_MODERATOR)
PENDING_PROFILE_COLUMNS = "id, full_name, username, avatar_url, email, mobile_number"


def get_pending_request(supabase: Client, user_id: str) -> dict | None:
    result = (
        supabase.table(REQUESTS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .eq("status", "pending")
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def request_deletion(data: RequestDeletionAction, user_id: str, supabase: Client):
    """
    Schedule the caller's account for deletion after the grace period.

    At most one pending request exists per user; asking again while one is
    pending is an error and returns the existing request.
    """
    existing = get_pending_request(supabase, user_id)
    if existing:
        return JSONResponse(
            status_code=400,
            content={
                "error": "A deletion request is already pending",
                "existing_request": existing,
            },
        )

    requested_at = utcnow()
    scheduled_at = requested_at + timedelta(days=config.DELETION_GRACE_DAYS)

    created = (
        supabase.table(REQUESTS_TABLE)
        .insert(
            {
                "user_id": user_id,
                "requested_at": isoformat(requested_at),
                "scheduled_deletion_at": isoformat(scheduled_at),
                "status": "pending",
            }
        )
        .execute()
    ).data[0]

    logger.info(f"deletion_requested user_id={user_id} scheduled_for={scheduled_at.isoformat()}")

    return {
        "success": True,
        "message": "Account deletion scheduled",
        "deletion_request": created,
    }


def cancel_deletion(data: CancelDeletionAction, user_id: str, supabase: Client):
    cancelled = (
        supabase.table(REQUESTS_TABLE)
        .update({"status": "cancelled", "cancelled_at": isoformat(utcnow())})
        .eq("user_id", user_id)
        .eq("status", "pending")
        .execute()
    )

    if not cancelled.data:
        raise HTTPException(status_code=404, detail="No pending deletion request found")

    logger.info(f"deletion_cancelled user_id={user_id}")

    return {
        "success": True,
        "message": "Account deletion cancelled",
        "deletion_request": cancelled.data[0],
    }


def get_status(data: GetStatusAction, user_id: str, supabase: Client):
    pending = get_pending_request(supabase, user_id)
    return {"has_pending_request": pending is not None, "deletion_request": pending}


def get_all_pending(data: GetAllPendingAction, user_id: str, supabase: Client):
    authorize_admin(supabase, user_id, DELETION_ADMIN_ROLES)

    requests = (
        supabase.table(REQUESTS_TABLE)
        .select("*")
        .eq("status", "pending")
        .order("scheduled_deletion_at", desc=False)
        .execute()
    )

    enriched = []
    for request in requests.data or []:
        profile = get_profile_summary(
            supabase, request["user_id"], PENDING_PROFILE_COLUMNS
        )
        enriched.append(
            {
                **request,
                "profiles": profile
                or {
                    "id": request["user_id"],
                    "full_name": None,
                    "username": None,
                    "avatar_url": None,
                    "email": None,
                    "mobile_number": None,
                },
            }
        )

    logger.info(f"pending_deletions_listed count={len(enriched)}")
    return {"success": True, "requests": enriched}


def delete_account(
    supabase: Client,
    user_id: str,
    admin_id: str,
    action: str,
    pending_request: dict | None,
):
    """
    Remove every row the user owns, close the deletion request and write the
    admin audit entry through the `delete_user_account` database function, so
    the whole cascade is one transaction.
    """
    if pending_request:
        details = {
            "deletion_request_id": pending_request["id"],
            "originally_scheduled_for": pending_request["scheduled_deletion_at"],
        }
    else:
        details = {"direct_deletion": True}

    supabase.rpc(
        "delete_user_account",
        {
            "p_user_id": user_id,
            "p_admin_id": admin_id,
            "p_action": (
                "Directly deleted user account"
                if action == "admin_delete_direct"
                else "Immediately deleted user account"
            ),
            "p_request_id": pending_request["id"] if pending_request else None,
            "p_details": details,
        },
    ).execute()


def admin_delete(data: AdminDeleteAction, user_id: str, supabase: Client):
    """
    Delete an account immediately on an admin's behalf.

    The caller's role is verified on every call. `admin_delete_now` honours a
    user's own pending request ahead of schedule; `admin_delete_direct` needs
    no request at all.
    """
    admin = authorize_admin(supabase, user_id, DELETION_ADMIN_ROLES)

    if not data.user_id:
        raise HTTPException(status_code=400, detail="user_id is required")

    target_id = str(data.user_id)
    pending = get_pending_request(supabase, target_id)

    if data.action == "admin_delete_now" and not pending:
        raise HTTPException(
            status_code=400,
            detail=(
                "No pending deletion request found for this user. "
                "Users must request deletion first."
            ),
        )

    logger.warning(
        f"account_deletion_started user_id={target_id} admin_id={admin.user_id} action={data.action}"
    )

    delete_account(supabase, target_id, admin.user_id, data.action, pending)

    logger.info(f"account_deleted user_id={target_id} admin_id={admin.user_id}")
    return {"success": True, "message": "User account permanently deleted"}


ACTIONS = {
    "request_deletion": request_deletion,
    "cancel_deletion": cancel_deletion,
    "get_status": get_status,
    "get_all_pending": get_all_pending,
    "admin_delete_now": admin_delete,
    "admin_delete_direct": admin_delete,
}


@router.post("", status_code=200)
def manage_account_deletion(
    data: AccountDeletionRequest,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Self-service account deletion with a grace period, plus admin overrides.

    **Actions**
    - `request_deletion`: schedule deletion DELETION_GRACE_DAYS from now
    - `cancel_deletion`: withdraw the pending request
    - `get_status`: the caller's pending request, if any
    - `get_all_pending`: admin; every pending request with its profile
    - `admin_delete_now`: admin; `user_id` with a pending request
    - `admin_delete_direct`: admin; `user_id`, no request needed

    **Errors**
    - 400: Duplicate request, missing `user_id`, no pending request
    - 401: Missing, invalid or expired session
    - 403: Admin action without super_admin or content_moderator
    - 404: Nothing to cancel
    """
    try:
        return ACTIONS[data.action](data, user_id, supabase)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"account_deletion_error action={data.action}")
        raise HTTPException(status_code=500, detail="Internal server error")
