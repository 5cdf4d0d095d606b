import pytest

from portfolios.core.preferences import PreferenceChange, Preferences


class TestPreferences:

    def test_missing_file_starts_empty(self, preferences):
        assert preferences.snapshot() == {}
        assert preferences.has_key("MasterVolume") is False
        assert preferences.get_float("MasterVolume", 0.75) == 0.75

    def test_setters_write_through(self, tmp_path, config_manager, preferences):
        preferences.set_float("MasterVolume", 0.5)
        preferences.set_int("Disable3D", 1)
        preferences.set_str("TerminalHistory", '{"history": []}')

        reloaded = Preferences(tmp_path / "prefs.txt", config_manager=config_manager)
        assert reloaded.get_float("MasterVolume") == 0.5
        assert reloaded.get_int("Disable3D") == 1
        assert reloaded.get_str("TerminalHistory") == '{"history": []}'

    def test_delete_key(self, preferences):
        preferences.set_int("Wallpaper", 3)
        assert preferences.delete_key("Wallpaper") is True
        assert preferences.has_key("Wallpaper") is False
        # Deleting an absent key is a no-op success
        assert preferences.delete_key("Wallpaper") is True

    def test_change_callback(self, tmp_path, config_manager):
        observed: list[PreferenceChange] = []
        prefs = Preferences(tmp_path / "prefs.txt", config_manager=config_manager, on_change=observed.append)

        prefs.set_int("Wallpaper", 2)
        prefs.write({}, remove_keys=["Wallpaper"])

        assert observed[0].updated == {"Wallpaper": 2}
        assert observed[1].removed == {"Wallpaper"}

    def test_empty_write_is_noop(self, preferences):
        assert preferences.write({}) is True
        assert not preferences.path.exists()

    @pytest.mark.asyncio
    async def test_async_write(self, preferences):
        assert await preferences.write_async({"MasterVolume": 0.3}) is True
        assert preferences.get_float("MasterVolume") == 0.3
