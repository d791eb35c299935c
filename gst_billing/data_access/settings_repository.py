# gst_billing/data_access/settings_repository.py

from typing import Optional
from gst_billing.data_access.database_manager import DatabaseManager
from gst_billing.business_logic.entities.setting_entity import SettingEntity
import logging

logger = logging.getLogger(__name__)

class SettingsRepository:
    """Key/value rows; the business settings live as one JSON document under a single key."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        self.table_name = "settings"

    def get_setting(self, key: str) -> Optional[SettingEntity]:
        row = self.db_manager.fetch_one(f"SELECT key, value FROM {self.table_name} WHERE key = ?", (key,))
        if row is None:
            logger.debug(f"No setting stored under '{key}'.")
            return None
        return SettingEntity(key=row['key'], value=row['value'])

    def set_setting(self, setting: SettingEntity) -> SettingEntity:
        query = (f"INSERT INTO {self.table_name} (key, value) VALUES (?, ?) "
                 f"ON CONFLICT(key) DO UPDATE SET value = excluded.value")
        self.db_manager.execute_query(query, (setting.key, setting.value))
        logger.debug(f"Setting '{setting.key}' written ({len(str(setting.value or ''))} chars).")
        return setting
