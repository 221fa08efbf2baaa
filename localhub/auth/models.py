profiles_sql = """
CREATE TABLE profiles (
    id UUID PRIMARY KEY REFERENCES auth.users(id) ON DELETE CASCADE,
    full_name TEXT,
    username TEXT UNIQUE,
    email TEXT,
    mobile_number TEXT,
    avatar_url TEXT,
    bio TEXT,
    location TEXT,
    is_online BOOLEAN DEFAULT FALSE,
    last_seen TIMESTAMPTZ,
    show_email BOOLEAN DEFAULT FALSE,
    show_mobile BOOLEAN DEFAULT FALSE,
    show_location BOOLEAN DEFAULT TRUE,
    email_verified BOOLEAN DEFAULT FALSE,
    is_verified BOOLEAN DEFAULT FALSE,
    email_verification_token TEXT,
    email_verification_sent_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ DEFAULT now()
);
"""

user_sessions_sql = """
CREATE TABLE user_sessions (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL REFERENCES profiles(id),
    session_token TEXT NOT NULL UNIQUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    expires_at TIMESTAMPTZ NOT NULL,
    last_refreshed_at TIMESTAMPTZ,
    is_active BOOLEAN NOT NULL DEFAULT TRUE
);

CREATE INDEX user_sessions_token_active_idx
    ON user_sessions (session_token) WHERE is_active;
"""

user_roles_sql = """
CREATE TYPE admin_role AS ENUM ('super_admin', 'content_moderator', 'category_manager');

CREATE TABLE user_roles (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    role admin_role NOT NULL,
    created_at TIMESTAMPTZ DEFAULT now(),

    CONSTRAINT unique_user_role UNIQUE (user_id, role)
);
"""
