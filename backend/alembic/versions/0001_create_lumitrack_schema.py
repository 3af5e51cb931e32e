"""create users, tariff, hierarchy and consumption tables"""
from alembic import op
import sqlalchemy as sa

from lumitrack.models.base import ExactDecimal

revision = "0001_create_lumitrack_schema"
down_revision = None
branch_labels = None
depends_on = None

user_type = sa.Enum("INDIVIDUAL", "COMPANY", name="user_type")
token_channel = sa.Enum("WEB", "MOBILE", name="token_channel")
electrical_system = sa.Enum("MONOPHASIC", "BIPHASIC", "TRIPHASIC", name="electrical_system")
consumption_period = sa.Enum("DAILY", "MONTHLY", "ANNUAL", name="consumption_period")
alert_target_type = sa.Enum("PROPERTY", "AREA", "DEVICE", name="alert_target_type")


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _fk(column: str, target: str, ondelete: str | None, nullable: bool = False) -> sa.Column:
    return sa.Column(
        column,
        sa.String(36),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("user_type", user_type, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("cpf", sa.String(14), nullable=True),
        sa.Column("company_name", sa.String(200), nullable=True),
        sa.Column("cnpj", sa.String(18), nullable=True),
        sa.Column("trade_name", sa.String(200), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("cpf", name="uq_users_cpf"),
        sa.UniqueConstraint("cnpj", name="uq_users_cnpj"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "auth_tokens",
        _id(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("channel", token_channel, nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_auth_tokens_user_id", "auth_tokens", ["user_id"])
    op.create_index("ix_auth_tokens_token", "auth_tokens", ["token"], unique=True)

    op.create_table(
        "password_resets",
        _id(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("token", sa.String(36), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_password_resets_user_id", "password_resets", ["user_id"])
    op.create_index("ix_password_resets_token", "password_resets", ["token"], unique=True)

    op.create_table(
        "energy_distributors",
        _id(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("cnpj", sa.String(18), nullable=False),
        sa.Column("electrical_system", electrical_system, nullable=False),
        sa.Column("working_voltage", sa.Integer(), nullable=False),
        sa.Column("kwh_price", ExactDecimal(10, 6), nullable=False),
        sa.Column("tax_rate", ExactDecimal(5, 4), nullable=True),
        sa.Column("public_lighting_fee", ExactDecimal(10, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "cnpj", name="uq_energy_distributors_user_cnpj"),
    )
    op.create_index("ix_energy_distributors_user_id", "energy_distributors", ["user_id"])

    op.create_table(
        "properties",
        _id(),
        _fk("user_id", "users.id", "CASCADE"),
        # No ON DELETE action: the service refuses to delete a distributor in use.
        _fk("distributor_id", "energy_distributors.id", None),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("zip_code", sa.String(9), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_properties_user_id", "properties", ["user_id"])
    op.create_index("ix_properties_distributor_id", "properties", ["distributor_id"])

    op.create_table(
        "areas",
        _id(),
        _fk("property_id", "properties.id", "CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_areas_property_id", "areas", ["property_id"])

    op.create_table(
        "devices",
        _id(),
        _fk("area_id", "areas.id", "CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("power_watts", ExactDecimal(12, 2), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_devices_area_id", "devices", ["area_id"])

    op.create_table(
        "consumption_records",
        _id(),
        _fk("property_id", "properties.id", "CASCADE", nullable=True),
        _fk("area_id", "areas.id", "CASCADE", nullable=True),
        _fk("device_id", "devices.id", "CASCADE", nullable=True),
        sa.Column("period", consumption_period, nullable=False),
        sa.Column("reference_date", sa.Date(), nullable=False),
        sa.Column("kwh_consumed", ExactDecimal(14, 4), nullable=False),
        sa.Column("cost_brl", ExactDecimal(20, 10), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(CASE WHEN property_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN area_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN device_id IS NOT NULL THEN 1 ELSE 0 END) = 1",
            name="ck_consumption_records_single_target",
        ),
        sa.UniqueConstraint(
            "property_id", "period", "reference_date",
            name="uq_consumption_records_property_period_date",
        ),
        sa.UniqueConstraint(
            "area_id", "period", "reference_date",
            name="uq_consumption_records_area_period_date",
        ),
        sa.UniqueConstraint(
            "device_id", "period", "reference_date",
            name="uq_consumption_records_device_period_date",
        ),
    )
    op.create_index("ix_consumption_records_area_id", "consumption_records", ["area_id"])
    op.create_index("ix_consumption_records_device_id", "consumption_records", ["device_id"])

    op.create_table(
        "iot_device_configs",
        _id(),
        _fk("device_id", "devices.id", "CASCADE"),
        sa.Column("protocol", sa.String(50), nullable=False),
        sa.Column("host", sa.String(255), nullable=True),
        sa.Column("port", sa.Integer(), nullable=True),
        sa.Column("topic", sa.String(255), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("extra", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("device_id", name="uq_iot_device_configs_device_id"),
    )

    op.create_table(
        "alerts",
        _id(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("target_type", alert_target_type, nullable=False),
        _fk("property_id", "properties.id", "SET NULL", nullable=True),
        _fk("area_id", "areas.id", "SET NULL", nullable=True),
        _fk("device_id", "devices.id", "SET NULL", nullable=True),
        sa.Column("threshold_kwh", ExactDecimal(14, 4), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("triggered_at", sa.DateTime(), nullable=True),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_alerts_user_id", "alerts", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_alerts_user_id", table_name="alerts")
    op.drop_table("alerts")
    op.drop_table("iot_device_configs")
    op.drop_index("ix_consumption_records_device_id", table_name="consumption_records")
    op.drop_index("ix_consumption_records_area_id", table_name="consumption_records")
    op.drop_table("consumption_records")
    op.drop_index("ix_devices_area_id", table_name="devices")
    op.drop_table("devices")
    op.drop_index("ix_areas_property_id", table_name="areas")
    op.drop_table("areas")
    op.drop_index("ix_properties_distributor_id", table_name="properties")
    op.drop_index("ix_properties_user_id", table_name="properties")
    op.drop_table("properties")
    op.drop_index("ix_energy_distributors_user_id", table_name="energy_distributors")
    op.drop_table("energy_distributors")
    op.drop_index("ix_password_resets_token", table_name="password_resets")
    op.drop_index("ix_password_resets_user_id", table_name="password_resets")
    op.drop_table("password_resets")
    op.drop_index("ix_auth_tokens_token", table_name="auth_tokens")
    op.drop_index("ix_auth_tokens_user_id", table_name="auth_tokens")
    op.drop_table("auth_tokens")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    for enum_type in (
        alert_target_type,
        consumption_period,
        electrical_system,
        token_channel,
        user_type,
    ):
        enum_type.drop(op.get_bind(), checkfirst=True)
