import logging

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core import config
from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_current_user_id
from localhub.core.errors import is_unique_violation
from localhub.moderation.filters import content_is_flagged, file_system_report
from localhub.utils.clock import isoformat, utcnow

from .schemas import (
    CreatePostModel,
    CreateCommentModel,
    ToggleLikeModel,
    ToggleLikeResponseModel,
    ReportPostModel,
    ReportPostResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


def _require_post(supabase: Client, post_id: str) -> dict:
    post = (
        supabase.table("posts")
        .select("id, user_id, is_hidden")
        .eq("id", post_id)
        .limit(1)
        .execute()
    )
    if not post.data:
        raise HTTPException(status_code=404, detail="Post not found")
    return post.data[0]


@router.post("/posts", status_code=200)
def create_post(
    data: CreatePostModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Publish a post to the feed.

    Posts containing an active blocked word are still published, but a
    system report (no reporter) is filed against them for moderator review.
    """
    content = data.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Post content required")

    try:
        flagged = content_is_flagged(supabase, content)

        post = (
            supabase.table("posts")
            .insert({"user_id": user_id, "content": content, "image_url": data.image_url})
            .execute()
        ).data[0]
    except Exception:
        logger.exception(f"post_create_failed user_id={user_id}")
        raise HTTPException(status_code=500, detail="Failed to create post")

    if flagged:
        logger.info(f"blocked_words_detected post_id={post['id']}")
        file_system_report(supabase, post["id"], "post")

    logger.info(f"post_created post_id={post['id']} user_id={user_id}")
    return {"success": True, "post": post, "flagged": flagged}


@router.post("/comments", status_code=200)
def create_comment(
    data: CreateCommentModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Comment on a post, with the same blocked-word auto-report as posts.

    **Errors**
    - 400: Empty content
    - 404: Post does not exist
    - 500: Comment could not be stored
    """
    content = data.content.strip()
    if not content:
        raise HTTPException(
            status_code=400, detail="Post ID and content are required"
        )

    post_id = str(data.post_id)

    try:
        _require_post(supabase, post_id)
        flagged = content_is_flagged(supabase, content)

        comment = (
            supabase.table("comments")
            .insert({"user_id": user_id, "post_id": post_id, "content": content})
            .execute()
        ).data[0]
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"comment_create_failed user_id={user_id} post_id={post_id}")
        raise HTTPException(status_code=500, detail="Failed to create comment")

    if flagged:
        logger.info(f"blocked_words_detected comment_id={comment['id']}")
        file_system_report(supabase, comment["id"], "comment")

    return {"success": True, "comment": comment}


@router.post("/likes", response_model=ToggleLikeResponseModel, status_code=200)
def toggle_like(
    data: ToggleLikeModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Flip the caller's like on a post.

    An existing like is removed (`liked: false`), otherwise one is added
    (`liked: true`). When a concurrent toggle inserted the same like first,
    the unique (user, post) constraint rejects ours and the post simply stays
    liked.
    """
    post_id = str(data.post_id)

    try:
        existing = (
            supabase.table("post_likes")
            .select("id")
            .eq("user_id", user_id)
            .eq("post_id", post_id)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("like_check_failed")
        raise HTTPException(status_code=500, detail="Failed to check like status")

    if existing.data:
        try:
            supabase.table("post_likes").delete().eq("id", existing.data[0]["id"]).execute()
        except Exception:
            logger.exception("unlike_failed")
            raise HTTPException(status_code=500, detail="Failed to unlike post")
        return {"success": True, "liked": False}

    try:
        supabase.table("post_likes").insert({"user_id": user_id, "post_id": post_id}).execute()
    except Exception as error:
        if is_unique_violation(error):
            logger.info(f"like_already_present user_id={user_id} post_id={post_id}")
            return {"success": True, "liked": True}
        logger.exception("like_failed")
        raise HTTPException(status_code=500, detail="Failed to like post")

    return {"success": True, "liked": True}


def record_post_report(
    supabase: Client,
    post_id: str,
    reporter_id: str,
    reason: str,
    description: str | None,
) -> dict:
    """
    Store a user report and re-evaluate the post's visibility.

    The report count is recomputed from all report rows on every call rather
    than incremented, then stored on the post. Once it reaches
    REPORT_HIDE_THRESHOLD the post is hidden by an update that only matches
    while `is_hidden` is still false, so the hide happens exactly once no
    matter how many further reports arrive.
    """
    supabase.table("reports").insert(
        {
            "reporter_id": reporter_id,
            "reported_id": post_id,
            "reported_type": "post",
            "reason": reason,
            "description": description or None,
        }
    ).execute()

    counted = (
        supabase.table("reports")
        .select("id", count="exact")
        .eq("reported_id", post_id)
        .eq("reported_type", "post")
        .execute()
    )
    report_count = counted.count if counted.count is not None else len(counted.data or [])

    supabase.table("posts").update({"report_count": report_count}).eq("id", post_id).execute()

    hidden = False
    if report_count >= config.REPORT_HIDE_THRESHOLD:
        hide = (
            supabase.table("posts")
            .update(
                {
                    "is_hidden": True,
                    "hidden_at": isoformat(utcnow()),
                    "hidden_reason": (
                        f"Auto-hidden due to {config.REPORT_HIDE_THRESHOLD}+ user reports"
                    ),
                }
            )
            .eq("id", post_id)
            .eq("is_hidden", False)
            .execute()
        )
        hidden = bool(hide.data)
        if hidden:
            logger.warning(f"post_auto_hidden post_id={post_id} report_count={report_count}")

    return {"report_count": report_count, "hidden": hidden}


@router.post("/reports", response_model=ReportPostResponseModel, status_code=200)
def report_post(
    data: ReportPostModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Report a post for moderation. Each user may report a given post once.

    **Errors**
    - 400: Missing reason, or the caller already reported this post
    - 404: Post does not exist
    - 500: Report could not be stored
    """
    reason = data.reason.strip()
    if not reason:
        raise HTTPException(status_code=400, detail="Post ID and reason are required")

    post_id = str(data.post_id)

    try:
        _require_post(supabase, post_id)

        existing = (
            supabase.table("reports")
            .select("id")
            .eq("reporter_id", user_id)
            .eq("reported_id", post_id)
            .eq("reported_type", "post")
            .limit(1)
            .execute()
        )
        if existing.data:
            raise HTTPException(
                status_code=400, detail="You have already reported this post"
            )

        outcome = record_post_report(supabase, post_id, user_id, reason, data.description)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"report_failed post_id={post_id}")
        raise HTTPException(status_code=500, detail="Failed to submit report")

    return {
        "success": True,
        "message": "Report submitted successfully",
        **outcome,
    }
