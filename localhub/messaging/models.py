conversations_sql = """
CREATE TABLE conversations (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    participant_one UUID NOT NULL REFERENCES profiles(id),
    participant_two UUID NOT NULL REFERENCES profiles(id),

    last_message_at TIMESTAMPTZ DEFAULT now(),
    created_at TIMESTAMPTZ DEFAULT now(),

    -- Enforce canonical ordering
    CONSTRAINT participant_one_less_than_two CHECK (participant_one < participant_two),

    -- Ensure only one conversation per user pair
    CONSTRAINT unique_conversation_pair UNIQUE (participant_one, participant_two)
);
"""

messages_sql = """
CREATE TABLE messages (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    conversation_id UUID REFERENCES conversations(id) ON DELETE CASCADE,
    sender_id UUID REFERENCES profiles(id),
    content TEXT NOT NULL,
    is_read BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ DEFAULT now()
);
"""
