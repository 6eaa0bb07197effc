import logging

from sqlalchemy.orm import Session

from menu_service.models.module import InstalledModule

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Read-only view of installed modules, keyed by slug."""

    def __init__(self, db: Session):
        self.db = db

    def list_modules(self, include_inactive: bool = False) -> list[InstalledModule]:
        query = self.db.query(InstalledModule)
        if not include_inactive:
            query = query.filter(InstalledModule.is_active.is_(True))
        return query.order_by(InstalledModule.slug).all()

    def icon_map(self) -> dict[str, str]:
        """Return `{slug: icon}` for every active module that declares an icon."""
        icons = {module.slug: module.icon for module in self.list_modules() if module.icon}
        logger.debug("Loaded %d module icons", len(icons))
        return icons
