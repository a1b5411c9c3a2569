"""create_transactions_and_budgets

Revision ID: 5c1d2e7f9a10
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "5c1d2e7f9a10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Creates the ledger and budget tables."""
    op.execute(
        """
        CREATE TABLE transactions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id VARCHAR(64) NOT NULL,
            amount NUMERIC(14, 2) NOT NULL CHECK (amount >= 0),
            type VARCHAR(16) NOT NULL CHECK (type IN ('income', 'expense')),
            category VARCHAR(64) NOT NULL,
            description TEXT,
            occurred_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
        );

        CREATE INDEX ix_transactions_user_type_occurred_at
            ON transactions (user_id, type, occurred_at);

        CREATE TABLE budgets (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id VARCHAR(64) NOT NULL,
            category VARCHAR(64) NOT NULL,
            amount NUMERIC(14, 2) NOT NULL CHECK (amount >= 0),
            period VARCHAR(16) NOT NULL CHECK (period IN ('weekly', 'monthly', 'yearly')),
            start_date DATE NOT NULL,
            end_date DATE NOT NULL,
            notifications_enabled BOOLEAN NOT NULL DEFAULT TRUE,
            notifications_threshold INTEGER NOT NULL DEFAULT 80
                CHECK (notifications_threshold BETWEEN 1 AND 100),
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_budgets_window CHECK (start_date < end_date)
        );

        CREATE INDEX ix_budgets_user_category_period
            ON budgets (user_id, category, period);
        """
    )


def downgrade() -> None:
    """Drops the ledger and budget tables."""
    op.execute(
        """
        DROP TABLE IF EXISTS budgets;
        DROP TABLE IF EXISTS transactions;
        """
    )
