from settingsdb.models.settings_entry import SettingsEntry

__all__ = ["SettingsEntry"]
