businesses_sql = """
CREATE TYPE approval_status AS ENUM ('pending', 'approved', 'rejected');

CREATE TABLE businesses (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    owner_id UUID NOT NULL REFERENCES profiles(id),
    name TEXT NOT NULL,
    description TEXT,
    category TEXT,
    location TEXT,
    logo_url TEXT,
    cover_image_url TEXT,
    website_url TEXT,
    instagram_link TEXT,
    youtube_link TEXT,
    approval_status approval_status NOT NULL DEFAULT 'pending',
    is_featured BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ DEFAULT now()
);
"""

business_follows_sql = """
CREATE TABLE business_follows (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    business_id UUID NOT NULL REFERENCES businesses(id) ON DELETE CASCADE,
    user_id UUID NOT NULL REFERENCES profiles(id),
    created_at TIMESTAMPTZ DEFAULT now(),

    CONSTRAINT unique_business_follow UNIQUE (business_id, user_id)
);
"""
