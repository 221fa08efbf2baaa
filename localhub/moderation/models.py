blocked_words_sql = """
CREATE TABLE blocked_words (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    word TEXT NOT NULL UNIQUE,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    created_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
    created_at TIMESTAMPTZ DEFAULT now()
);
"""

reports_sql = """
CREATE TYPE report_target AS ENUM ('post', 'comment');

CREATE TABLE reports (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    -- NULL for system-generated reports
    reporter_id UUID REFERENCES profiles(id) ON DELETE SET NULL,

    reported_id UUID NOT NULL,
    reported_type report_target NOT NULL,
    reason TEXT NOT NULL,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TIMESTAMPTZ DEFAULT now()
);

CREATE INDEX reports_target_idx ON reports (reported_type, reported_id);
"""
