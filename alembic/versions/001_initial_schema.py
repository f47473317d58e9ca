"""001 – Initial schema: employees, sessions, leave, holidays, audit, seed data.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 10:00:00.000000+05:30
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # Enum-valued columns are VARCHAR with CHECK constraints so new values
    # need no type migration.

    # ── 1. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_code  VARCHAR(20)  NOT NULL UNIQUE,
            name           VARCHAR(100) NOT NULL,
            email          VARCHAR(255) NOT NULL UNIQUE,
            password_hash  VARCHAR(255) NOT NULL,
            department     VARCHAR(100) NOT NULL,
            role           VARCHAR(20)  NOT NULL DEFAULT 'employee'
                           CHECK (role IN ('employee', 'hr', 'admin')),
            gender         VARCHAR(20)
                           CHECK (gender IN ('male', 'female', 'other')),
            joining_date   DATE NOT NULL,
            is_active      BOOLEAN NOT NULL DEFAULT TRUE,
            created_at     TIMESTAMPTZ DEFAULT NOW(),
            updated_at     TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_employees_department ON employees(department)")
    op.execute("CREATE INDEX ix_employees_role       ON employees(role)")

    # ── 2. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            token_hash   VARCHAR(128) NOT NULL,
            ip_address   VARCHAR(45),
            user_agent   TEXT,
            expires_at   TIMESTAMPTZ NOT NULL,
            is_revoked   BOOLEAN NOT NULL DEFAULT FALSE,
            created_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_user_sessions_token_hash ON user_sessions(token_hash)")
    op.execute("CREATE INDEX ix_user_sessions_employee   ON user_sessions(employee_id)")

    # ── 3. public_holidays ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE public_holidays (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name         VARCHAR(100) NOT NULL,
            date         DATE NOT NULL UNIQUE,
            description  TEXT,
            is_active    BOOLEAN NOT NULL DEFAULT TRUE,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 4. leave_types ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_types (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name          VARCHAR(50) NOT NULL UNIQUE,
            description   TEXT,
            default_days  INTEGER NOT NULL DEFAULT 0 CHECK (default_days >= 0),
            color         VARCHAR(7) NOT NULL DEFAULT '#3B82F6',
            category      VARCHAR(20) NOT NULL DEFAULT 'standard'
                          CHECK (category IN ('standard', 'maternity', 'paternity', 'unpaid')),
            is_active     BOOLEAN NOT NULL DEFAULT TRUE,
            created_at    TIMESTAMPTZ DEFAULT NOW(),
            updated_at    TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 5. leave_balances ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_balances (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id    UUID NOT NULL REFERENCES employees(id),
            leave_type_id  UUID NOT NULL REFERENCES leave_types(id),
            year           INTEGER NOT NULL,
            total_days     NUMERIC(5,2) NOT NULL DEFAULT 0,
            used_days      NUMERIC(5,2) NOT NULL DEFAULT 0,
            created_at     TIMESTAMPTZ DEFAULT NOW(),
            updated_at     TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_leave_balance UNIQUE (employee_id, leave_type_id, year),
            CONSTRAINT ck_leave_balance_used_non_negative CHECK (used_days >= 0)
        )
    """)

    # ── 6. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id       UUID NOT NULL REFERENCES employees(id),
            leave_type_id     UUID NOT NULL REFERENCES leave_types(id),
            start_date        DATE NOT NULL,
            end_date          DATE NOT NULL,
            total_days        NUMERIC(5,2) NOT NULL,
            is_half_day       BOOLEAN NOT NULL DEFAULT FALSE,
            half_day_session  VARCHAR(2) CHECK (half_day_session IN ('AM', 'PM')),
            reason            TEXT NOT NULL,
            status            VARCHAR(20) NOT NULL DEFAULT 'pending'
                              CHECK (status IN ('pending', 'approved', 'rejected', 'cancelled')),
            approved_by       UUID REFERENCES employees(id),
            approved_at       TIMESTAMPTZ,
            rejection_reason  TEXT,
            cancelled_at      TIMESTAMPTZ,
            created_at        TIMESTAMPTZ DEFAULT NOW(),
            updated_at        TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_request_dates CHECK (end_date >= start_date)
        )
    """)
    op.execute("""
        CREATE INDEX ix_leave_requests_employee_dates
            ON leave_requests(employee_id, start_date, end_date)
    """)
    op.execute("CREATE INDEX ix_leave_requests_status ON leave_requests(status)")

    # ── 7. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     UUID REFERENCES employees(id),
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID NOT NULL,
            old_values   JSON,
            new_values   JSON,
            ip_address   VARCHAR(45),
            user_agent   TEXT,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id   ON audit_trail(actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity     ON audit_trail(entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")

    # ── Seed data ─────────────────────────────────────────────────────────
    op.execute("""
        INSERT INTO leave_types (name, description, default_days, color, category) VALUES
            ('Annual Leave',    'Regular annual vacation leave',    24,  '#10B981', 'standard'),
            ('Sick Leave',      'Medical and health-related leave', 10,  '#EF4444', 'standard'),
            ('Casual Leave',    'Short personal leave',             8,   '#F59E0B', 'standard'),
            ('Maternity Leave', 'Maternity and childcare leave',    180, '#EC4899', 'maternity'),
            ('Unpaid Leave',    'Leave without pay',                0,   '#9CA3AF', 'unpaid')
        ON CONFLICT (name) DO NOTHING
    """)
    op.execute("""
        INSERT INTO public_holidays (name, date, description) VALUES
            ('Republic Day',     '2024-01-26', 'National holiday'),
            ('Independence Day', '2024-08-15', 'National holiday'),
            ('Gandhi Jayanti',   '2024-10-02', 'National holiday'),
            ('Christmas',        '2024-12-25', 'Religious holiday'),
            ('New Year',         '2025-01-01', 'New Year holiday')
        ON CONFLICT (date) DO NOTHING
    """)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "leave_requests",
        "leave_balances",
        "leave_types",
        "public_holidays",
        "user_sessions",
        "employees",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")
