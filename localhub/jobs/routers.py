import logging
from datetime import timedelta

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core import config
from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_optional_user_id, require_user
from localhub.core.errors import is_unique_violation
from localhub.utils.clock import isoformat, parse_timestamp, utcnow
from localhub.utils.profile_lookup import count_rows

from .schemas import (
    JobsRequest,
    ListJobsAction,
    CreateJobAction,
    ApplyJobAction,
    CloseJobAction,
)


logger = logging.getLogger(__name__)
router = APIRouter()


def close_expired_jobs(supabase: Client) -> int:
    """Close every open job whose expiry has passed. Jobs without expiry stay open."""
    closed = (
        supabase.table("jobs")
        .update({"status": "closed"})
        .eq("status", "open")
        .lt("expires_at", isoformat(utcnow()))
        .execute()
    )
    count = len(closed.data or [])
    if count:
        logger.info(f"jobs_auto_closed count={count}")
    return count


def _get_job(supabase: Client, job_id: str) -> dict:
    job = supabase.table("jobs").select("*").eq("id", job_id).limit(1).execute()
    if not job.data:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.data[0]


def list_jobs(data: ListJobsAction, user_id: str | None, supabase: Client):
    close_expired_jobs(supabase)

    jobs = supabase.table("jobs").select("*").order("created_at", desc=True).execute()

    return {
        "jobs": [
            {
                **job,
                "application_count": count_rows(
                    supabase, "job_applications", job_id=job["id"]
                ),
            }
            for job in jobs.data or []
        ]
    }


def create_job(data: CreateJobAction, user_id: str | None, supabase: Client):
    user_id = require_user(user_id)

    title = data.title.strip()
    description = data.description.strip()
    if not title or not description:
        raise HTTPException(status_code=400, detail="Title and description are required")

    expires_days = data.expires_days or config.DEFAULT_JOB_EXPIRY_DAYS

    job = (
        supabase.table("jobs")
        .insert(
            {
                "creator_id": user_id,
                "title": title,
                "description": description,
                "conditions": data.conditions or None,
                "location": data.location or None,
                "max_applications": data.max_applications,
                "expires_at": isoformat(utcnow() + timedelta(days=expires_days)),
                "status": "open",
            }
        )
        .execute()
    ).data[0]

    logger.info(f"job_created job_id={job['id']} creator_id={user_id}")
    return {"success": True, "job": job}


def apply_to_job(data: ApplyJobAction, user_id: str | None, supabase: Client):
    """
    Submit an application.

    Closed or expired jobs and jobs that reached `max_applications` refuse new
    applications; applying twice is rejected by the unique (job, applicant)
    constraint.
    """
    user_id = require_user(user_id)
    job_id = str(data.job_id)
    job = _get_job(supabase, job_id)

    if job["creator_id"] == user_id:
        raise HTTPException(status_code=400, detail="You cannot apply to your own job")

    expires_at = parse_timestamp(job.get("expires_at"))
    if job["status"] != "open" or (expires_at and expires_at <= utcnow()):
        raise HTTPException(
            status_code=400, detail="This job is no longer accepting applications"
        )

    if job.get("max_applications"):
        received = count_rows(supabase, "job_applications", job_id=job_id)
        if received >= job["max_applications"]:
            raise HTTPException(
                status_code=400, detail="This job has reached its application limit"
            )

    try:
        application = (
            supabase.table("job_applications")
            .insert(
                {
                    "job_id": job_id,
                    "applicant_id": user_id,
                    "message": data.message or None,
                    "education_qualification": data.education_qualification or None,
                    "experience_details": data.experience_details or None,
                }
            )
            .execute()
        ).data[0]
    except Exception as error:
        if is_unique_violation(error):
            raise HTTPException(
                status_code=409, detail="You have already applied to this job"
            )
        raise

    logger.info(f"job_application_created job_id={job_id} applicant_id={user_id}")
    return {"success": True, "application": application}


def close_job(data: CloseJobAction, user_id: str | None, supabase: Client):
    user_id = require_user(user_id)
    job = _get_job(supabase, str(data.job_id))

    if job["creator_id"] != user_id:
        raise HTTPException(
            status_code=403, detail="You don't have permission to manage this job"
        )

    supabase.table("jobs").update({"status": "closed"}).eq("id", job["id"]).execute()
    return {"success": True}


ACTIONS = {
    "list": list_jobs,
    "create": create_job,
    "apply": apply_to_job,
    "close": close_job,
}


@router.post("", status_code=200)
def manage_jobs(
    data: JobsRequest,
    user_id: str | None = Depends(get_optional_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Jobs board.

    **Actions**
    - `list`: public; closes expired jobs first, then lists every job with
      its application count
    - `create`: `title`, `description`, optional `conditions`, `location`,
      `max_applications`, `expires_days`
    - `apply`: `job_id`, optional `message`, `education_qualification`,
      `experience_details`
    - `close`: `job_id` (creator only)

    Every action except `list` requires a session.
    """
    try:
        return ACTIONS[data.action](data, user_id, supabase)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"jobs_error action={data.action}")
        raise HTTPException(status_code=500, detail="Internal server error")
