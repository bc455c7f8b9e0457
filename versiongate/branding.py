"""Centralized branding constants — single source of truth for version."""


class AppBranding:
    """Application identity constants."""

    APP_NAME = "VersionGate"
    VERSION = "1.0.0"

    @classmethod
    def user_agent(cls) -> str:
        # Store pages serve a stripped-down body to unknown clients
        return f"Mozilla/5.0 (compatible; {cls.APP_NAME}/{cls.VERSION})"
