"""Settings manager — reads/writes settings.ini via configparser."""
from configparser import ConfigParser
from pathlib import Path

from reactform.core.prefix import COMMENT_PREFIX
from reactform.core.constants import RELOAD_DEBOUNCE_MS, LOG_LEVELS


class SettingsManager:
    def __init__(self, ini_path: Path) -> None:
        self.ini_path = ini_path
        self.config = ConfigParser(comment_prefixes=(COMMENT_PREFIX, ";"), inline_comment_prefixes=(COMMENT_PREFIX,))
        if ini_path.exists():
            self.config.read(ini_path, encoding="utf-8")

    # ------------------------------------------------------------------
    # Generic getters
    # ------------------------------------------------------------------
    def get(self, section: str, key: str, fallback: str = "") -> str:
        return self.config.get(section, key, fallback=fallback)

    def getint(self, section: str, key: str, fallback: int = 0) -> int:
        return self.config.getint(section, key, fallback=fallback)

    def getfloat(self, section: str, key: str, fallback: float = 0.0) -> float:
        return self.config.getfloat(section, key, fallback=fallback)

    def getbool(self, section: str, key: str, fallback: bool = False) -> bool:
        return self.config.getboolean(section, key, fallback=fallback)

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, value)
        self.save()

    def save(self) -> None:
        with open(self.ini_path, "w", encoding="utf-8") as f:
            self.config.write(f)

    # ------------------------------------------------------------------
    # Convenience properties
    # ------------------------------------------------------------------
    @property
    def ui_file(self) -> Path:
        return Path(self.get("GENERAL", "ui_file", "ui/demo.xml"))

    @property
    def state_file(self) -> Path:
        return Path(self.get("GENERAL", "state_file", "state.json"))

    @property
    def hot_reload(self) -> bool:
        return self.getbool("RELOAD", "enabled", True)

    @property
    def reload_debounce_ms(self) -> int:
        return self.getint("RELOAD", "debounce_ms", RELOAD_DEBOUNCE_MS)

    @property
    def log_level(self) -> str:
        """Lowest level shown in the log panel; unknown names fall back to INFO."""
        level = self.get("LOG", "level", "INFO").upper()
        return level if level in LOG_LEVELS else "INFO"
