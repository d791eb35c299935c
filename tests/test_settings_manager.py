# tests/test_settings_manager.py

import json
from decimal import Decimal

import pytest

from gst_billing.business_logic.entities.business_settings_entity import BusinessSettings
from gst_billing.business_logic.entities.setting_entity import SettingEntity
from gst_billing.business_logic.exceptions import ValidationError, PersistenceError
from gst_billing.business_logic.settings_manager import SettingsManager, merge_settings
from gst_billing.constants import SETTINGS_KEY_GENERAL


def test_merge_settings_fills_defaults():
    assert merge_settings(None) == BusinessSettings()
    assert merge_settings({}) == BusinessSettings()


def test_merge_settings_coerces_stored_values():
    merged = merge_settings({
        "name": "Shree Traders",
        "next_invoice_number": "12",
        "enable_gst": "true",
        "default_gst_rate": 18,
        "show_upi_qr": 1,
    })
    assert merged.name == "Shree Traders"
    assert merged.next_invoice_number == 12
    assert merged.enable_gst is True
    assert merged.default_gst_rate == Decimal("18")
    assert merged.show_upi_qr is True
    assert merged.mobile == BusinessSettings().mobile


def test_merge_settings_falls_back_on_unusable_values(caplog):
    merged = merge_settings({"logo_width": "wide", "next_invoice_number": "3.5", "enable_gst": "maybe"})

    assert merged.logo_width == BusinessSettings().logo_width
    assert merged.next_invoice_number == 1
    assert merged.enable_gst is False
    assert "logo_width" in caplog.text


def test_merge_settings_ignores_unknown_keys():
    assert merge_settings({"legacy_field": "x"}) == BusinessSettings()


def test_constructor_requires_repository():
    with pytest.raises(ValueError):
        SettingsManager(None)


def test_load_on_empty_store_writes_defaults(settings_repo):
    manager = SettingsManager(settings_repo)

    assert manager.load_settings() == BusinessSettings()
    stored = settings_repo.get_setting(SETTINGS_KEY_GENERAL)
    assert stored is not None
    assert json.loads(stored.value)["next_invoice_number"] == 1


def test_load_with_corrupt_document_uses_defaults(settings_repo):
    settings_repo.set_setting(SettingEntity(key=SETTINGS_KEY_GENERAL, value="{not json"))
    assert SettingsManager(settings_repo).load_settings() == BusinessSettings()


def test_update_settings_persists_and_bumps_version(settings_manager, settings_repo):
    before = settings_manager.current
    saved = settings_manager.update_settings(name="Shree Traders", enable_gst="yes", default_gst_rate="5")

    assert saved.version == before.version + 1
    reloaded = SettingsManager(settings_repo).load_settings()
    assert reloaded == saved
    assert reloaded.default_gst_rate == Decimal("5")
    assert reloaded.tax_configuration.half_rate == Decimal("2.5")


def test_update_settings_rejects_unknown_and_invalid(settings_manager):
    with pytest.raises(ValidationError):
        settings_manager.update_settings(bogus=1)
    with pytest.raises(ValidationError):
        settings_manager.update_settings(next_invoice_number=0)
    with pytest.raises(ValidationError):
        settings_manager.update_settings(default_gst_rate="-1")
    with pytest.raises(ValidationError):
        settings_manager.update_settings(next_invoice_number="ten")


def test_subscribers_hear_every_version(settings_manager):
    seen = []
    unsubscribe = settings_manager.subscribe(seen.append)

    settings_manager.update_settings(name="A")
    settings_manager.update_settings(name="B")
    unsubscribe()
    settings_manager.update_settings(name="C")

    assert [s.name for s in seen] == ["A", "B"]
    assert seen[1].version == seen[0].version + 1


def test_advance_invoice_number_is_idempotent(settings_manager):
    settings_manager.update_settings(next_invoice_number=5)

    assert settings_manager.advance_invoice_number(5).next_invoice_number == 6
    assert settings_manager.advance_invoice_number(5).next_invoice_number == 6
    # an older bill never pulls the counter back
    assert settings_manager.advance_invoice_number(3).next_invoice_number == 6
    # a counter that lagged behind jumps past the stored bill
    assert settings_manager.advance_invoice_number(9).next_invoice_number == 10


def test_write_failure_is_persistence_error(settings_manager, settings_repo, monkeypatch):
    def broken(setting):
        raise OSError("read-only database")
    monkeypatch.setattr(settings_repo, "set_setting", broken)

    with pytest.raises(PersistenceError):
        settings_manager.update_settings(name="X")
    assert settings_manager.current.name == BusinessSettings().name
