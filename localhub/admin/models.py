communities_sql = """
CREATE TABLE communities (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    created_by UUID NOT NULL REFERENCES profiles(id),
    name TEXT NOT NULL,
    description TEXT,
    cover_image_url TEXT,
    approval_status approval_status NOT NULL DEFAULT 'pending',
    created_at TIMESTAMPTZ DEFAULT now()
);
"""

community_members_sql = """
CREATE TABLE community_members (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    community_id UUID NOT NULL REFERENCES communities(id) ON DELETE CASCADE,
    user_id UUID NOT NULL REFERENCES profiles(id),
    created_at TIMESTAMPTZ DEFAULT now(),

    CONSTRAINT unique_community_member UNIQUE (community_id, user_id)
);
"""

# Entity type -> (table, owner column, columns an admin may change)
MANAGED_ENTITIES = {
    "business": (
        "businesses",
        "owner_id",
        ("approval_status", "is_featured", "name", "description", "category", "location"),
    ),
    "community": (
        "communities",
        "created_by",
        ("approval_status", "name", "description", "cover_image_url"),
    ),
    "job": (
        "jobs",
        "creator_id",
        ("approval_status", "status", "title", "description", "location", "expires_at"),
    ),
}
