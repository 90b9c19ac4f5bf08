"""registry init: members, families, sacraments, registers, tithes, rbac

Revision ID: 5c1e7a9d2b40
Revises:
Create Date: 2026-10-18 09:12:41.203117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e7a9d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


GENDER = sa.Enum("Male", "Female", name="member_gender")
MEMBERSHIP_STATUS = sa.Enum("active", "inactive", "transferred", "deceased", name="membership_status")
MATRIMONY_STATUS = sa.Enum("single", "married", "widowed", "separated", "divorced", name="matrimony_status")
SACRAMENT_TYPE = sa.Enum(
    "baptism",
    "confirmation",
    "first_communion",
    "marriage",
    "holy_orders",
    "anointing_of_sick",
    "eucharist",
    name="sacrament_type",
)
DETAILED_RECORD_KIND = sa.Enum("baptism_record", "marriage_record", name="detailed_record_kind")
TITHE_TYPE = sa.Enum(
    "tithe",
    "offering",
    "special_collection",
    "donation",
    "thanksgiving",
    "project_contribution",
    name="tithe_type",
)
PAYMENT_METHOD = sa.Enum("cash", "check", "mobile_money", "bank_transfer", "card", name="tithe_payment_method")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    # --- RBAC ---------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("api_key_hash", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_api_key_hash", "users", ["api_key_hash"])

    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.Uuid(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "role_permissions",
        sa.Column("role_id", sa.Uuid(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("permission", sa.String(100), primary_key=True),
    )

    # --- Families / members -------------------------------------------------
    # head_of_family_id gets its FK once members exists
    op.create_table(
        "families",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("family_name", sa.String(255), nullable=False),
        sa.Column("family_code", sa.String(50), nullable=True, unique=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("deanery", sa.String(100), nullable=True),
        sa.Column("parish", sa.String(100), nullable=True),
        sa.Column("head_of_family_id", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_families_id", "families", ["id"])
    op.create_index("ix_families_family_name", "families", ["family_name"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", GENDER, nullable=True),
        sa.Column("id_number", sa.String(20), nullable=True, unique=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("residence", sa.Text(), nullable=True),
        sa.Column("local_church", sa.String(100), nullable=True),
        sa.Column("church_group", sa.String(100), nullable=True),
        sa.Column("tribe", sa.String(50), nullable=True),
        sa.Column("clan", sa.String(50), nullable=True),
        sa.Column("occupation", sa.String(100), nullable=True),
        sa.Column("membership_status", MEMBERSHIP_STATUS, nullable=False, server_default="active"),
        sa.Column("membership_date", sa.Date(), nullable=True),
        sa.Column("matrimony_status", MATRIMONY_STATUS, nullable=False, server_default="single"),
        sa.Column("baptism_date", sa.Date(), nullable=True),
        sa.Column("confirmation_date", sa.Date(), nullable=True),
        sa.Column("marriage_date", sa.Date(), nullable=True),
        sa.Column("marriage_location", sa.String(100), nullable=True),
        sa.Column("family_id", sa.Integer(), sa.ForeignKey("families.id", ondelete="SET NULL"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    for col in (
        "id",
        "first_name",
        "last_name",
        "gender",
        "local_church",
        "church_group",
        "tribe",
        "membership_status",
        "baptism_date",
        "confirmation_date",
        "family_id",
    ):
        op.create_index(f"ix_members_{col}", "members", [col])

    with op.batch_alter_table("families") as batch:
        batch.create_foreign_key(
            "fk_families_head_member", "members", ["head_of_family_id"], ["id"], ondelete="SET NULL"
        )

    # --- Sacrament facts ----------------------------------------------------
    op.create_table(
        "sacraments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=True),
        sa.Column("sacrament_type", SACRAMENT_TYPE, nullable=False),
        sa.Column("sacrament_date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("celebrant", sa.String(255), nullable=True),
        sa.Column("witness_1", sa.String(255), nullable=True),
        sa.Column("witness_2", sa.String(255), nullable=True),
        sa.Column("godparent_1", sa.String(255), nullable=True),
        sa.Column("godparent_2", sa.String(255), nullable=True),
        sa.Column("certificate_number", sa.String(100), nullable=True),
        sa.Column("book_number", sa.String(50), nullable=True),
        sa.Column("page_number", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("detailed_record_type", DETAILED_RECORD_KIND, nullable=True),
        sa.Column("detailed_record_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(detailed_record_type IS NULL) = (detailed_record_id IS NULL)",
            name="ck_sacraments_detail_pointer_pair",
        ),
    )
    for col in ("id", "member_id", "sacrament_type", "sacrament_date", "location", "certificate_number"):
        op.create_index(f"ix_sacraments_{col}", "sacraments", [col])
    op.create_index("ix_sacraments_member_type", "sacraments", ["member_id", "sacrament_type"])
    op.create_index("ix_sacraments_type_date", "sacraments", ["sacrament_type", "sacrament_date"])

    # --- Registers ----------------------------------------------------------
    def sacrament_fk(name: str) -> sa.Column:
        return sa.Column(name, sa.Integer(), sa.ForeignKey("sacraments.id", ondelete="SET NULL"), nullable=True)

    op.create_table(
        "baptism_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("record_number", sa.String(50), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("father_name", sa.String(255), nullable=False),
        sa.Column("mother_name", sa.String(255), nullable=False),
        sa.Column("tribe", sa.String(255), nullable=False),
        sa.Column("birth_village", sa.String(255), nullable=False),
        sa.Column("county", sa.String(255), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=False),
        sa.Column("residence", sa.Text(), nullable=False),
        sa.Column("baptism_location", sa.String(255), nullable=False),
        sa.Column("baptism_date", sa.Date(), nullable=False),
        sa.Column("baptized_by", sa.String(255), nullable=False),
        sa.Column("sponsor", sa.String(255), nullable=False),
        sa.Column("eucharist_location", sa.String(255), nullable=True),
        sa.Column("eucharist_date", sa.Date(), nullable=True),
        sa.Column("confirmation_location", sa.String(255), nullable=True),
        sa.Column("confirmation_date", sa.Date(), nullable=True),
        sa.Column("confirmation_number", sa.String(50), nullable=True),
        sa.Column("confirmation_register_number", sa.String(50), nullable=True),
        sa.Column("marriage_spouse", sa.String(255), nullable=True),
        sa.Column("marriage_location", sa.String(255), nullable=True),
        sa.Column("marriage_date", sa.Date(), nullable=True),
        sa.Column("marriage_register_number", sa.String(50), nullable=True),
        sa.Column("marriage_number", sa.String(50), nullable=True),
        sacrament_fk("baptism_sacrament_id"),
        sacrament_fk("eucharist_sacrament_id"),
        sacrament_fk("confirmation_sacrament_id"),
        sacrament_fk("marriage_sacrament_id"),
        *_timestamps(),
    )
    op.create_index("ix_baptism_records_id", "baptism_records", ["id"])
    op.create_index("ix_baptism_records_record_number", "baptism_records", ["record_number"], unique=True)
    for col in ("member_id", "tribe", "baptism_location", "baptism_date"):
        op.create_index(f"ix_baptism_records_{col}", "baptism_records", [col])
    op.create_index("ix_baptism_records_parents", "baptism_records", ["father_name", "mother_name"])

    spouse_cols = []
    for side, widowed in (("husband", "widower_of"), ("wife", "widow_of")):
        spouse_cols += [
            sa.Column(f"{side}_name", sa.String(255), nullable=True),
            sa.Column(f"{side}_father_name", sa.String(255), nullable=True),
            sa.Column(f"{side}_mother_name", sa.String(255), nullable=True),
            sa.Column(f"{side}_tribe", sa.String(255), nullable=True),
            sa.Column(f"{side}_clan", sa.String(255), nullable=True),
            sa.Column(f"{side}_birth_place", sa.String(255), nullable=True),
            sa.Column(f"{side}_domicile", sa.String(255), nullable=True),
            sa.Column(f"{side}_baptized_at", sa.String(255), nullable=True),
            sa.Column(f"{side}_baptism_date", sa.Date(), nullable=True),
            sa.Column(f"{side}_{widowed}", sa.String(255), nullable=True),
            sa.Column(f"{side}_parent_consent", sa.Boolean(), nullable=True),
        ]

    op.create_table(
        "marriage_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("record_number", sa.String(50), nullable=False),
        *spouse_cols,
        sa.Column("banas_number", sa.String(50), nullable=True),
        sa.Column("banas_church_1", sa.String(255), nullable=True),
        sa.Column("banas_date_1", sa.Date(), nullable=True),
        sa.Column("banas_church_2", sa.String(255), nullable=True),
        sa.Column("banas_date_2", sa.Date(), nullable=True),
        sa.Column("dispensation_from", sa.String(255), nullable=True),
        sa.Column("dispensation_given_by", sa.String(255), nullable=True),
        sa.Column("dispensation_impediment", sa.String(255), nullable=True),
        sa.Column("dispensation_date", sa.Date(), nullable=True),
        sa.Column("marriage_date", sa.Date(), nullable=False),
        sa.Column("marriage_church", sa.String(255), nullable=False),
        sa.Column("district", sa.String(255), nullable=True),
        sa.Column("province", sa.String(255), nullable=True),
        sa.Column("presence_of", sa.String(255), nullable=False),
        sa.Column("delegated_by", sa.String(255), nullable=True),
        sa.Column("delegation_date", sa.Date(), nullable=True),
        sa.Column("male_witness_name", sa.String(255), nullable=False),
        sa.Column("male_witness_father", sa.String(255), nullable=True),
        sa.Column("male_witness_clan", sa.String(255), nullable=True),
        sa.Column("female_witness_name", sa.String(255), nullable=False),
        sa.Column("female_witness_father", sa.String(255), nullable=True),
        sa.Column("female_witness_clan", sa.String(255), nullable=True),
        sa.Column("civil_marriage_certificate_number", sa.String(100), nullable=True),
        sa.Column("other_documents", sa.Text(), nullable=True),
        sa.Column("husband_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="SET NULL"), nullable=True),
        sa.Column("wife_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="SET NULL"), nullable=True),
        sacrament_fk("sacrament_id"),
        sa.Column("parish_priest_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "husband_name IS NOT NULL OR wife_name IS NOT NULL",
            name="ck_marriage_records_a_spouse_named",
        ),
    )
    op.create_index("ix_marriage_records_id", "marriage_records", ["id"])
    op.create_index("ix_marriage_records_record_number", "marriage_records", ["record_number"], unique=True)
    for col in ("marriage_date", "marriage_church", "sacrament_id"):
        op.create_index(f"ix_marriage_records_{col}", "marriage_records", [col])
    op.create_index("ix_marriage_records_spouse_names", "marriage_records", ["husband_name", "wife_name"])
    op.create_index("ix_marriage_records_spouse_ids", "marriage_records", ["husband_id", "wife_id"])

    # --- Contributions ------------------------------------------------------
    op.create_table(
        "tithes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("tithe_type", TITHE_TYPE, nullable=False),
        sa.Column("payment_method", PAYMENT_METHOD, nullable=False),
        sa.Column("date_given", sa.Date(), nullable=False),
        sa.Column("purpose", sa.String(255), nullable=True),
        sa.Column("receipt_number", sa.String(100), nullable=True),
        sa.Column("reference_number", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_tithes_amount_positive"),
    )
    for col in ("member_id", "payment_method", "date_given", "receipt_number"):
        op.create_index(f"ix_tithes_{col}", "tithes", [col])
    op.create_index("ix_tithes_member_date", "tithes", ["member_id", "date_given"])
    op.create_index("ix_tithes_type_date", "tithes", ["tithe_type", "date_given"])


def downgrade() -> None:
    op.drop_table("tithes")
    op.drop_table("marriage_records")
    op.drop_table("baptism_records")
    op.drop_table("sacraments")
    with op.batch_alter_table("families") as batch:
        batch.drop_constraint("fk_families_head_member", type_="foreignkey")
    op.drop_table("members")
    op.drop_table("families")
    op.drop_table("role_permissions")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        PAYMENT_METHOD,
        TITHE_TYPE,
        DETAILED_RECORD_KIND,
        SACRAMENT_TYPE,
        MATRIMONY_STATUS,
        MEMBERSHIP_STATUS,
        GENDER,
    ):
        enum_type.drop(bind, checkfirst=True)
