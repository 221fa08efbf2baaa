from fastapi import HTTPException
from supabase import Client

PUBLIC_PROFILE_COLUMNS = "id, full_name, username, avatar_url, is_online"


def get_profile_summary(
    supabase: Client, user_id: str, columns: str = PUBLIC_PROFILE_COLUMNS
) -> dict | None:
    """Get the public part of a user's profile using their id"""

    try:
        response = (
            supabase.table("profiles")
            .select(columns)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
    except Exception:
        raise HTTPException(500, detail="Database error while looking up profile.")

    return response.data[0] if response.data else None


def count_rows(supabase: Client, table: str, **filters) -> int:
    query = supabase.table(table).select("id", count="exact")
    for column, value in filters.items():
        query = query.eq(column, value)
    response = query.execute()
    if response.count is not None:
        return response.count
    return len(response.data or [])
