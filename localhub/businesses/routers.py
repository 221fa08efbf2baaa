import logging

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_current_user_id
from localhub.core.errors import is_unique_violation
from localhub.utils.profile_lookup import count_rows

from .schemas import (
    ManageBusinessRequest,
    ListBusinessesAction,
    UpdateBusinessAction,
    DeleteBusinessAction,
    BusinessFollowModel,
    BusinessFollowResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()

LIST_COLUMNS = "id, name, description, category, logo_url, location, approval_status, owner_id"


def _require_owned_business(supabase: Client, business_id, user_id: str) -> dict:
    if not business_id:
        raise HTTPException(status_code=400, detail="Business ID is required")

    business = (
        supabase.table("businesses")
        .select("id, owner_id")
        .eq("id", str(business_id))
        .limit(1)
        .execute()
    )

    if not business.data:
        raise HTTPException(status_code=404, detail="Business not found")

    if business.data[0]["owner_id"] != user_id:
        raise HTTPException(
            status_code=403,
            detail="You don't have permission to manage this business",
        )

    return business.data[0]


def list_businesses(data: ListBusinessesAction, user_id: str, supabase: Client):
    """The caller's businesses in every approval state, with follower counts."""
    businesses = (
        supabase.table("businesses")
        .select(LIST_COLUMNS)
        .eq("owner_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )

    enriched = [
        {
            **business,
            "follower_count": count_rows(
                supabase, "business_follows", business_id=business["id"]
            ),
        }
        for business in businesses.data or []
    ]

    logger.info(f"businesses_listed owner_id={user_id} count={len(enriched)}")
    return {"success": True, "businesses": enriched}


def update_business(data: UpdateBusinessAction, user_id: str, supabase: Client):
    business = _require_owned_business(supabase, data.business_id, user_id)

    updates = data.updates()
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = (
        supabase.table("businesses").update(updates).eq("id", business["id"]).execute()
    )

    logger.info(f"business_updated business_id={business['id']} fields={sorted(updates)}")
    return {"success": True, "business": updated.data[0] if updated.data else None}


def delete_business(data: DeleteBusinessAction, user_id: str, supabase: Client):
    business = _require_owned_business(supabase, data.business_id, user_id)

    supabase.table("businesses").delete().eq("id", business["id"]).execute()

    logger.info(f"business_deleted business_id={business['id']}")
    return {"success": True}


ACTIONS = {
    "list": list_businesses,
    "update": update_business,
    "delete": delete_business,
}


@router.post("/manage", status_code=200)
def manage_business(
    data: ManageBusinessRequest,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Owner-side management of business listings.

    **Actions**
    - `list`: the caller's businesses, including pending and rejected ones
    - `update`: `business_id` plus any editable field
    - `delete`: `business_id`

    **Errors**
    - 400: Missing business id or nothing to update
    - 403: The caller does not own the business
    - 404: Business not found
    """
    try:
        return ACTIONS[data.action](data, user_id, supabase)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"manage_business_error action={data.action}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/follow", response_model=BusinessFollowResponseModel, status_code=200)
def business_follow(
    data: BusinessFollowModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Follow or unfollow a business.

    Following twice is not an error: the unique (business, user) constraint
    turns the second insert into an "Already following" success.
    """
    if not data.business_id:
        raise HTTPException(status_code=400, detail="Business ID is required")

    business_id = str(data.business_id)

    if data.action == "follow":
        try:
            supabase.table("business_follows").insert(
                {"business_id": business_id, "user_id": user_id}
            ).execute()
        except Exception as error:
            if is_unique_violation(error):
                return {"success": True, "message": "Already following"}
            logger.exception("follow_business_failed")
            raise HTTPException(status_code=400, detail="Failed to follow business")
        return {"success": True}

    try:
        supabase.table("business_follows").delete().eq("business_id", business_id).eq(
            "user_id", user_id
        ).execute()
    except Exception:
        logger.exception("unfollow_business_failed")
        raise HTTPException(status_code=400, detail="Failed to unfollow business")
    return {"success": True}
