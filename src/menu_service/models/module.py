from sqlalchemy import Boolean, Column, DateTime, Integer, String

from menu_service.db import Base
from menu_service.models.user import _utc_now


class InstalledModule(Base):
    """
    Registry entry for an installed business module (accounting, hr, ...).

    The icon stored here is the module's current icon; resolved menus pick it
    up for the module's root entry.
    """

    __tablename__ = "installed_modules"

    id = Column(Integer, primary_key=True)
    slug = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(128), nullable=False)
    icon = Column(String(64), nullable=True)
    version = Column(String(32), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)
