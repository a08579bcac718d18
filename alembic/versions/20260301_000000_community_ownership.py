"""Community ownership and close timestamp

Revision ID: 20260301_000000
Revises: 20260101_000000
Create Date: 2026-03-01 00:00:00.000000

Adds the owner wallet that answers human-facing threads and may close the
community, and the time a community was closed.
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = "20260101_000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("sns_communities", sa.Column("owner_wallet", sa.String(64), nullable=True))
    op.add_column("sns_communities", sa.Column("closed_at", sa.DateTime(), nullable=True))
    op.create_index("ix_sns_communities_owner_wallet", "sns_communities", ["owner_wallet"])


def downgrade() -> None:
    op.drop_index("ix_sns_communities_owner_wallet", table_name="sns_communities")
    op.drop_column("sns_communities", "closed_at")
    op.drop_column("sns_communities", "owner_wallet")
