"""Gate settings — persistence via JSON."""

import json
import logging
import os
from dataclasses import dataclass, field, asdict

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join(os.environ.get('LOCALAPPDATA', '.'), 'VersionGate')

ORACLES = ('play_store', 'app_store', 'backend')
REMEDIATIONS = ('store', 'native')


@dataclass
class GateSettings:
    """Persistent update-gate settings."""
    # Application
    app_id: str = ""                    # Package name / bundle identifier
    data_dir: str = ""

    # Installed version — first non-empty wins
    installed_version: str = ""         # Fixed string
    distribution: str = ""              # Installed package metadata
    apk_path: str = ""                  # aapt dump badging
    aapt_path: str = "aapt"

    # Latest version
    oracle: str = "play_store"          # 'play_store', 'app_store' or 'backend'
    locale: str = "en"                  # Play Store listing language
    country: str = "us"                 # App Store storefront
    backend_url: str = ""               # May contain {app_id}
    backend_field: str = "latest_version"
    timeout: float = 10.0               # Seconds per request
    retries: int = 0                    # Extra attempts on network/timeout

    # Policy
    minimum_version: str = ""           # '' = every newer release is forced

    # Remediation
    remediation: str = "store"          # 'store' or 'native'
    store_url: str = ""                 # '' = oracle's listing URL
    native_command: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.data_dir:
            self.data_dir = DEFAULT_DATA_DIR
        if self.oracle not in ORACLES:
            logger.warning("Unknown oracle '%s', using play_store", self.oracle)
            self.oracle = "play_store"
        if self.remediation not in REMEDIATIONS:
            logger.warning("Unknown remediation '%s', using store", self.remediation)
            self.remediation = "store"
        if self.retries < 0:
            self.retries = 0

    @staticmethod
    def load(path: str | None = None) -> 'GateSettings':
        """Load settings from JSON. Returns defaults if file doesn't exist."""
        if path is None:
            path = os.path.join(DEFAULT_DATA_DIR, 'settings.json')

        if not os.path.isfile(path):
            logger.info("No settings file, using defaults")
            return GateSettings()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            settings = GateSettings(**{k: v for k, v in data.items()
                                       if k in GateSettings.__dataclass_fields__})
            logger.info("Loaded settings from %s", path)
            return settings
        except Exception as e:
            logger.warning("Failed to load settings: %s", e)
            return GateSettings()

    def save(self, path: str | None = None):
        """Save settings to JSON."""
        if path is None:
            path = os.path.join(self.data_dir, 'settings.json')

        os.makedirs(os.path.dirname(path), exist_ok=True)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(asdict(self), f, indent=2)
            logger.info("Saved settings to %s", path)
        except Exception as e:
            logger.warning("Failed to save settings: %s", e)

    def ensure_dirs(self):
        """Create data directories if they don't exist."""
        os.makedirs(os.path.join(self.data_dir, 'logs'), exist_ok=True)
