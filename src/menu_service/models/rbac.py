from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint

from menu_service.db import Base


class Role(Base):
    """
    Tenant role. Sessions carry the role's display name; menu assignments
    reference the role by id.
    """

    __tablename__ = "roles"
    id = Column(Integer, primary_key=True)
    name = Column(String(64), nullable=False, index=True)
    description = Column(String(256), default="")
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)  # None = global role

    __table_args__ = (UniqueConstraint("name", "tenant_id", name="uq_role_name_tenant"),)
