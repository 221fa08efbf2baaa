import json
import logging

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import AdminPrincipal, require_roles
from localhub.core.permissions import Role, has_any
from localhub.utils.profile_lookup import count_rows, get_profile_summary

from .models import MANAGED_ENTITIES
from .schemas import (
    AdminDataRequest,
    ListEntitiesAction,
    UpdateBusinessAction,
    UpdateCommunityAction,
    UpdateJobAction,
)


logger = logging.getLogger(__name__)
router = APIRouter()

require_admin = require_roles()

CREATOR_COLUMNS = "full_name, username"


def log_admin_activity(
    supabase: Client,
    admin_id: str,
    action: str,
    target_type: str,
    target_id: str,
    details: dict | None = None,
):
    supabase.table("admin_activity_logs").insert(
        {
            "admin_id": admin_id,
            "action": action,
            "target_type": target_type,
            "target_id": target_id,
            "details": details,
        }
    ).execute()


def _list_with_creator(supabase: Client, table: str, owner_column: str, alias: str):
    rows = supabase.table(table).select("*").order("created_at", desc=True).execute()
    return [
        {
            **row,
            alias: get_profile_summary(supabase, row[owner_column], CREATOR_COLUMNS)
            if row.get(owner_column)
            else None,
        }
        for row in rows.data or []
    ]


def get_businesses(supabase: Client):
    return {"businesses": _list_with_creator(supabase, "businesses", "owner_id", "owner")}


def get_communities(supabase: Client):
    communities = _list_with_creator(supabase, "communities", "created_by", "creator")
    for community in communities:
        community["member_count"] = count_rows(
            supabase, "community_members", community_id=community["id"]
        )
    return {"communities": communities}


def get_jobs(supabase: Client):
    jobs = _list_with_creator(supabase, "jobs", "creator_id", "creator")
    for job in jobs:
        job["application_count"] = count_rows(supabase, "job_applications", job_id=job["id"])
    return {"jobs": jobs}


def get_stats(supabase: Client):
    """Dashboard counters: items awaiting approval and auto-hidden posts."""
    return {
        "stats": {
            "pending_communities": count_rows(supabase, "communities", approval_status="pending"),
            "pending_businesses": count_rows(supabase, "businesses", approval_status="pending"),
            "pending_jobs": count_rows(supabase, "jobs", approval_status="pending"),
            "hidden_posts": count_rows(supabase, "posts", is_hidden=True),
            "pending_reports": count_rows(supabase, "reports", status="pending"),
        }
    }


LISTINGS = {
    "get_businesses": get_businesses,
    "get_communities": get_communities,
    "get_jobs": get_jobs,
    "get_stats": get_stats,
}


def update_entity(
    supabase: Client,
    admin: AdminPrincipal,
    entity_type: str,
    entity_id: str,
    updates: dict,
):
    """
    Apply an admin edit to a business, community or job and record it in
    `admin_activity_logs`. Columns outside the entity's whitelist are rejected.
    """
    if not has_any(admin.capabilities, (Role.CATEGORY_MANAGER,)):
        raise HTTPException(
            status_code=403, detail="Unauthorized: Category manager role required"
        )

    table, _, editable = MANAGED_ENTITIES[entity_type]

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    rejected = sorted(set(updates) - set(editable))
    if rejected:
        raise HTTPException(
            status_code=400, detail=f"Fields cannot be updated: {', '.join(rejected)}"
        )

    result = supabase.table(table).update(updates).eq("id", entity_id).execute()
    if not result.data:
        raise HTTPException(status_code=404, detail=f"{entity_type.capitalize()} not found")

    log_admin_activity(
        supabase,
        admin.user_id,
        f"Updated {entity_type}: {json.dumps(updates, sort_keys=True)}",
        entity_type,
        entity_id,
    )

    logger.info(f"admin_update entity={entity_type} id={entity_id} admin_id={admin.user_id}")
    return {"success": True}


@router.post("", status_code=200)
def admin_data(
    data: AdminDataRequest,
    admin: AdminPrincipal = Depends(require_admin),
    supabase: Client = Depends(get_supabase),
):
    """
    Admin dashboard data.

    Any admin role may read; updates need `category_manager` (or
    `super_admin`).

    **Actions**
    - `get_businesses`, `get_communities`, `get_jobs`, `get_stats`
    - `update_business`: `business_id`, `updates`
    - `update_community`: `community_id`, `updates`
    - `update_job`: `job_id`, `updates`

    **Errors**
    - 401: Missing, invalid or expired session
    - 403: No admin role / role too narrow for updates
    - 404: Entity not found
    """
    try:
        if isinstance(data, ListEntitiesAction):
            return LISTINGS[data.action](supabase)
        if isinstance(data, UpdateBusinessAction):
            return update_entity(supabase, admin, "business", str(data.business_id), data.updates)
        if isinstance(data, UpdateCommunityAction):
            return update_entity(
                supabase, admin, "community", str(data.community_id), data.updates
            )
        if isinstance(data, UpdateJobAction):
            return update_entity(supabase, admin, "job", str(data.job_id), data.updates)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"admin_data_error action={data.action}")
        raise HTTPException(status_code=500, detail="Internal server error")

    raise HTTPException(status_code=400, detail="Unknown action")
