# gst_billing/business_logic/settings_manager.py

import json
from dataclasses import fields, replace, MISSING
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, TYPE_CHECKING

from .entities.business_settings_entity import BusinessSettings
from .entities.setting_entity import SettingEntity
from .exceptions import PersistenceError, ValidationError
from gst_billing.constants import SETTINGS_KEY_GENERAL
from gst_billing.utils.money import to_decimal

if TYPE_CHECKING:
    from ..data_access.settings_repository import SettingsRepository

import logging
logger = logging.getLogger(__name__)

SettingsListener = Callable[[BusinessSettings], None]

_TRUE_TEXT = ("1", "true", "yes", "on")
_FALSE_TEXT = ("0", "false", "no", "off", "")


def _coerce(value: Any, target_type: type) -> Any:
    if target_type is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.strip().lower() in _TRUE_TEXT + _FALSE_TEXT:
            return value.strip().lower() in _TRUE_TEXT
        raise ValueError(f"{value!r} is not a boolean")
    if target_type is int:
        if isinstance(value, bool):
            raise ValueError(f"{value!r} is not an integer")
        dec = to_decimal(value)
        if dec != dec.to_integral_value():
            raise ValueError(f"{value!r} is not a whole number")
        return int(dec)
    if target_type is Decimal:
        return to_decimal(value)
    if target_type is str:
        if value is None:
            raise ValueError("None is not text")
        return str(value)
    return value


def merge_settings(stored: Optional[Mapping[str, Any]]) -> BusinessSettings:
    """
    Completes a partially stored settings document with the defaults
    declared on BusinessSettings.

    Unknown keys are dropped. A value that cannot be read as its field's type
    falls back to the default and is logged; the merge itself never fails.
    """
    stored = stored or {}
    values: Dict[str, Any] = {}
    for f in fields(BusinessSettings):
        if f.name not in stored:
            continue
        raw = stored[f.name]
        try:
            values[f.name] = _coerce(raw, f.type)
        except ValueError:
            default = f.default if f.default is not MISSING else f.default_factory()
            logger.warning(f"Setting '{f.name}' has unusable value {raw!r}; using default {default!r}.")
    ignored = set(stored) - {f.name for f in fields(BusinessSettings)}
    if ignored:
        logger.debug(f"Ignoring unknown settings keys: {sorted(ignored)}")
    return BusinessSettings(**values)


class SettingsManager:
    """
    Loads and saves the single business settings document and tells
    subscribers (the cart, open tabs) about each new version.
    """

    def __init__(self, settings_repository: 'SettingsRepository'):
        if settings_repository is None:
            raise ValueError("settings_repository cannot be None")
        self.settings_repo = settings_repository
        self._current: Optional[BusinessSettings] = None
        self._listeners: List[SettingsListener] = []

    @property
    def current(self) -> BusinessSettings:
        if self._current is None:
            return self.load_settings()
        return self._current

    def subscribe(self, callback: SettingsListener) -> Callable[[], None]:
        """Registers a listener; returns a function that removes it again."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def _notify(self, settings: BusinessSettings):
        for listener in list(self._listeners):
            listener(settings)

    def load_settings(self) -> BusinessSettings:
        entity = self.settings_repo.get_setting(SETTINGS_KEY_GENERAL)
        if entity is None or not entity.value:
            logger.info("No stored settings found; writing defaults.")
            settings = BusinessSettings()
            self._write(settings)
        else:
            try:
                stored = json.loads(entity.value)
            except (TypeError, ValueError):
                logger.warning("Stored settings are not valid JSON; falling back to defaults.", exc_info=True)
                stored = {}
            if not isinstance(stored, dict):
                logger.warning(f"Stored settings have unexpected shape {type(stored).__name__}; using defaults.")
                stored = {}
            settings = merge_settings(stored)
        self._current = settings
        logger.debug(f"Settings loaded (version {settings.version}, next bill {settings.next_invoice_number}).")
        return settings

    def _write(self, settings: BusinessSettings):
        try:
            self.settings_repo.set_setting(SettingEntity(
                key=SETTINGS_KEY_GENERAL,
                value=json.dumps(settings.to_dict(), sort_keys=True),
            ))
        except Exception as e:
            logger.error(f"Failed to write settings version {settings.version}: {e}", exc_info=True)
            raise PersistenceError(f"Could not save settings: {e}") from e

    def save_settings(self, settings: BusinessSettings) -> BusinessSettings:
        """Stores settings as the next version and notifies subscribers."""
        if settings.next_invoice_number < 1:
            raise ValidationError("Next invoice number must be at least 1.")
        if settings.default_gst_rate < 0:
            raise ValidationError("GST rate cannot be negative.")
        if settings.logo_width <= 0:
            raise ValidationError("Logo width must be positive.")
        base_version = self._current.version if self._current is not None else settings.version
        new_settings = replace(settings, version=max(base_version, settings.version) + 1)
        self._write(new_settings)
        self._current = new_settings
        logger.info(f"Settings saved as version {new_settings.version}.")
        self._notify(new_settings)
        return new_settings

    def update_settings(self, **changes: Any) -> BusinessSettings:
        """Applies field changes (coerced like stored values) on top of the current settings."""
        current = self.current
        unknown = set(changes) - {f.name for f in fields(BusinessSettings)}
        if unknown:
            raise ValidationError(f"Unknown settings fields: {', '.join(sorted(unknown))}")
        coerced = {}
        for f in fields(BusinessSettings):
            if f.name in changes and f.name != "version":
                try:
                    coerced[f.name] = _coerce(changes[f.name], f.type)
                except ValueError as e:
                    raise ValidationError(f"Invalid value for '{f.name}': {e}") from e
        return self.save_settings(replace(current, **coerced))

    def advance_invoice_number(self, expected_current: int) -> BusinessSettings:
        """
        Moves the counter past a bill that was just stored. The counter ends
        at least at expected_current + 1 and never moves backwards, so
        repeating the call is harmless.
        """
        current = self.current
        target = max(current.next_invoice_number, expected_current + 1)
        if current.next_invoice_number != expected_current:
            logger.warning(f"Invoice counter was {current.next_invoice_number} while advancing past "
                           f"{expected_current}; setting it to {target}.")
        if target == current.next_invoice_number:
            return current
        updated = self.save_settings(replace(current, next_invoice_number=target))
        logger.info(f"Invoice counter advanced to {updated.next_invoice_number}.")
        return updated
