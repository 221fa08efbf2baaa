jobs_sql = """
CREATE TYPE job_status AS ENUM ('open', 'closed');

CREATE TABLE jobs (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    creator_id UUID NOT NULL REFERENCES profiles(id),
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    conditions TEXT,
    location TEXT,
    max_applications INTEGER CHECK (max_applications IS NULL OR max_applications > 0),
    expires_at TIMESTAMPTZ,
    status job_status NOT NULL DEFAULT 'open',
    approval_status approval_status NOT NULL DEFAULT 'pending',
    created_at TIMESTAMPTZ DEFAULT now()
);
"""

job_applications_sql = """
CREATE TABLE job_applications (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    job_id UUID NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    applicant_id UUID NOT NULL REFERENCES profiles(id),
    message TEXT,
    education_qualification TEXT,
    experience_details TEXT,
    created_at TIMESTAMPTZ DEFAULT now(),

    CONSTRAINT unique_job_application UNIQUE (job_id, applicant_id)
);
"""
