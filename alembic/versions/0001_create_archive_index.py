"""create archive index tables"""

from alembic import op
import sqlalchemy as sa

revision = "0001_create_archive_index"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "types",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("type", sa.String, nullable=False, unique=True),
        sa.Column("file_type", sa.String, nullable=False),
        sa.Column("interval", sa.Integer, nullable=True),
        sa.Column("observed", sa.Boolean, nullable=False),
    )
    op.create_table(
        "sites",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("short_name", sa.String, nullable=False, unique=True),
        sa.Column("long_name", sa.String, nullable=True),
        sa.Column("state", sa.String, nullable=True),
        sa.Column("notes", sa.String, nullable=True),
        sa.Column(
            "mobile_sounding_site",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("0"),
        ),
    )
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("latitude", sa.Integer, nullable=True),
        sa.Column("longitude", sa.Integer, nullable=True),
        sa.Column("elevation_meters", sa.Integer, nullable=True),
        sa.Column("tz_offset_seconds", sa.Integer, nullable=True),
    )
    op.create_table(
        "files",
        sa.Column("type_id", sa.Integer, sa.ForeignKey("types.id"), nullable=False),
        sa.Column("site_id", sa.Integer, sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("location_id", sa.Integer, sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("init_time", sa.String, nullable=False),
        sa.Column("end_time", sa.String, nullable=False),
        sa.Column("file_name", sa.String, primary_key=True),
    )
    op.create_index("fname", "files", ["file_name"], unique=True)
    op.create_index("no_dups_files", "files", ["type_id", "site_id", "init_time"], unique=True)
    op.create_index(
        "no_dups_locations",
        "locations",
        ["latitude", "longitude", "elevation_meters"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("no_dups_locations", table_name="locations")
    op.drop_index("no_dups_files", table_name="files")
    op.drop_index("fname", table_name="files")
    op.drop_table("files")
    op.drop_table("locations")
    op.drop_table("sites")
    op.drop_table("types")
