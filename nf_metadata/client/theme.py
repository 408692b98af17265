from __future__ import annotations

from typing import Literal

from nf_metadata.client.state_store import STORAGE_KEY_THEME, JsonStateStore

Theme = Literal["dark", "light"]


class ThemePreference:
    def __init__(self, store: JsonStateStore) -> None:
        self._store = store
        saved = store.get(STORAGE_KEY_THEME, "dark")
        self._theme: Theme = "light" if saved == "light" else "dark"

    @property
    def theme(self) -> Theme:
        return self._theme

    def set(self, theme: Theme) -> None:
        self._theme = "light" if theme == "light" else "dark"
        self._store.set(STORAGE_KEY_THEME, self._theme)

    def toggle(self) -> Theme:
        self.set("light" if self._theme == "dark" else "dark")
        return self._theme
