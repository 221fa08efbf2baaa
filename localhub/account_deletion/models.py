from typing import NamedTuple


class CascadeStep(NamedTuple):
    table: str
    columns: tuple[str, ...]


# Rows owned by a user, in foreign-key safe order. The profile row and the
# deletion request bookkeeping come after these steps.
ACCOUNT_CASCADE = (
    CascadeStep("messages", ("sender_id",)),
    CascadeStep("conversations", ("participant_one", "participant_two")),
    CascadeStep("post_likes", ("user_id",)),
    CascadeStep("comments", ("user_id",)),
    CascadeStep("posts", ("user_id",)),
    CascadeStep("follows", ("follower_id", "following_id")),
    CascadeStep("business_follows", ("user_id",)),
    CascadeStep("community_members", ("user_id",)),
    CascadeStep("community_discussions", ("user_id",)),
    CascadeStep("notifications", ("user_id",)),
    CascadeStep("user_skills", ("user_id",)),
    CascadeStep("user_sessions", ("user_id",)),
    CascadeStep("user_credentials", ("id",)),
)


account_deletion_requests_sql = """
CREATE TYPE deletion_status AS ENUM ('pending', 'cancelled', 'completed');

CREATE TABLE account_deletion_requests (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL,
    requested_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    scheduled_deletion_at TIMESTAMPTZ NOT NULL,
    status deletion_status NOT NULL DEFAULT 'pending',
    cancelled_at TIMESTAMPTZ,
    deleted_at TIMESTAMPTZ
);

CREATE INDEX account_deletion_requests_pending_idx
    ON account_deletion_requests (scheduled_deletion_at) WHERE status = 'pending';
"""

admin_activity_logs_sql = """
CREATE TABLE admin_activity_logs (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    admin_id UUID NOT NULL,
    action TEXT NOT NULL,
    target_type TEXT NOT NULL,
    target_id UUID,
    details JSONB,
    created_at TIMESTAMPTZ DEFAULT now()
);
"""


def _cascade_statement(step: CascadeStep) -> str:
    predicate = " OR ".join(f"{column} = p_user_id" for column in step.columns)
    return f"    DELETE FROM {step.table} WHERE {predicate};"


def build_delete_user_account_sql(cascade=ACCOUNT_CASCADE) -> str:
    """
    Compile the cascade into one PL/pgSQL function.

    A function body runs inside a single transaction, so either every step
    commits or none does.
    """
    statements = "\n".join(_cascade_statement(step) for step in cascade)
    return f"""
CREATE OR REPLACE FUNCTION delete_user_account(
    p_user_id UUID,
    p_admin_id UUID,
    p_action TEXT,
    p_request_id UUID,
    p_details JSONB
) RETURNS VOID
LANGUAGE plpgsql
SECURITY DEFINER
AS $$
BEGIN
{statements}

    IF p_request_id IS NOT NULL THEN
        UPDATE account_deletion_requests
           SET status = 'completed', deleted_at = now()
         WHERE id = p_request_id;
    END IF;

    DELETE FROM profiles WHERE id = p_user_id;

    INSERT INTO admin_activity_logs (admin_id, action, target_type, target_id, details)
    VALUES (p_admin_id, p_action, 'user', p_user_id, p_details);
END;
$$;
"""


delete_user_account_sql = build_delete_user_account_sql()
