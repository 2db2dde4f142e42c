"""Initial schema: entries, identities, and the entries change trigger.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create identities table
    op.execute("""
        CREATE TABLE identities (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            is_anonymous BOOLEAN NOT NULL DEFAULT true,
            display_name TEXT,
            photo_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    # Create entries table
    op.execute("""
        CREATE TABLE entries (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL CHECK (length(btrim(name)) > 0),
            description TEXT NOT NULL CHECK (length(btrim(description)) > 0),
            website_url TEXT NOT NULL DEFAULT '',
            category TEXT NOT NULL DEFAULT '',
            pricing TEXT NOT NULL CHECK (pricing IN ('Free', 'Freemium', 'Paid')),
            tags TEXT[] NOT NULL DEFAULT '{}',
            rating_sum INTEGER NOT NULL DEFAULT 0 CHECK (rating_sum >= 0),
            rating_count INTEGER NOT NULL DEFAULT 0 CHECK (rating_count >= 0),
            comment_count INTEGER NOT NULL DEFAULT 0 CHECK (comment_count >= 0),
            submitted_by UUID REFERENCES identities(id) ON DELETE SET NULL,
            submitted_by_name TEXT,
            submitted_by_photo TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    op.execute("""
        CREATE INDEX idx_entries_created_at ON entries(created_at DESC);
    """)

    # Every change to entries is announced on the entries_changed channel
    op.execute("""
        CREATE FUNCTION notify_entries_changed() RETURNS trigger AS $$
        BEGIN
            PERFORM pg_notify('entries_changed', COALESCE(NEW.id, OLD.id)::text);
            RETURN NULL;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.execute("""
        CREATE TRIGGER entries_notify
        AFTER INSERT OR UPDATE OR DELETE ON entries
        FOR EACH ROW EXECUTE FUNCTION notify_entries_changed();
    """)


def downgrade():
    op.execute("DROP TRIGGER IF EXISTS entries_notify ON entries;")
    op.execute("DROP FUNCTION IF EXISTS notify_entries_changed();")
    op.execute("DROP TABLE IF EXISTS entries;")
    op.execute("DROP TABLE IF EXISTS identities;")
