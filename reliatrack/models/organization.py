"""
Organization (team workspace) model.
"""

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base


class Organization(Base):
    """
    A team workspace. Members see each other's assets.

    Members reference the organization through ``users.organization_id``;
    ``created_by`` is informational and carries no foreign key so the two
    tables do not depend on each other at create time.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[str] = mapped_column(Uuid(as_uuid=False, native_uuid=False), nullable=False)

    # Settings
    allow_external_access: Mapped[bool] = mapped_column(Boolean, default=False)
    share_assets: Mapped[bool] = mapped_column(Boolean, default=True)
    share_maintenance: Mapped[bool] = mapped_column(Boolean, default=True)

    def settings_dict(self) -> dict:
        return {
            "allow_external_access": self.allow_external_access,
            "data_sharing": {
                "assets": self.share_assets,
                "maintenance": self.share_maintenance,
            },
        }

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name})>"
