import logging

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core import config
from localhub.core.supabase_client import get_supabase

from .schemas import ExploreRequest, SearchAction, CategoryAction, TrendingAction


logger = logging.getLogger(__name__)
router = APIRouter()

PROFILE_COLUMNS = "id, full_name, username, avatar_url, bio, location"
BUSINESS_COLUMNS = "id, name, description, logo_url, category, location"
COMMUNITY_COLUMNS = "id, name, description, cover_image_url"

# Characters with meaning inside a PostgREST or= filter or an ILIKE pattern
_FILTER_SPECIAL = str.maketrans({",": " ", "(": " ", ")": " ", "%": " ", "_": " ", "*": " "})


def ilike_any(columns: tuple[str, ...], term: str) -> str:
    """Build an `or=` filter matching `term` as a substring of any column."""
    return ",".join(f"{column}.ilike.%{term}%" for column in columns)


def clean_term(query: str) -> str:
    return " ".join(query.translate(_FILTER_SPECIAL).split())


def search(data: SearchAction, supabase: Client):
    term = clean_term(data.query)
    if not term:
        raise HTTPException(status_code=400, detail="Search query is required")

    limit = config.SEARCH_RESULT_LIMIT

    users = (
        supabase.table("profiles")
        .select(PROFILE_COLUMNS)
        .or_(ilike_any(("full_name", "username", "bio"), term))
        .limit(limit)
        .execute()
    )
    businesses = (
        supabase.table("businesses")
        .select(BUSINESS_COLUMNS)
        .or_(ilike_any(("name", "description"), term))
        .limit(limit)
        .execute()
    )
    communities = (
        supabase.table("communities")
        .select(COMMUNITY_COLUMNS)
        .or_(ilike_any(("name", "description"), term))
        .limit(limit)
        .execute()
    )

    results = {
        "users": users.data or [],
        "businesses": businesses.data or [],
        "communities": communities.data or [],
    }
    results["total"] = sum(len(rows) for rows in results.values())
    return results


def by_category(data: CategoryAction, supabase: Client):
    businesses = (
        supabase.table("businesses")
        .select(BUSINESS_COLUMNS)
        .eq("category", data.category)
        .limit(config.SEARCH_RESULT_LIMIT)
        .execute()
    )
    return {"businesses": businesses.data or []}


def trending(data: TrendingAction, supabase: Client):
    businesses = (
        supabase.table("businesses").select("*").eq("is_featured", True).limit(6).execute()
    )
    return {"businesses": businesses.data or []}


ACTIONS = {
    "search": search,
    "category": by_category,
    "trending": trending,
}


@router.post("", status_code=200)
def explore(data: ExploreRequest, supabase: Client = Depends(get_supabase)):
    """
    Public discovery: substring search over people, businesses and
    communities, businesses by category, and featured businesses.
    """
    try:
        return ACTIONS[data.action](data, supabase)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"explore_error action={data.action}")
        raise HTTPException(status_code=500, detail="Internal server error")
