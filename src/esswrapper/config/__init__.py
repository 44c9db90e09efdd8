"""Configuration loading."""

from esswrapper.config.settings import EssSettings, ObservabilitySettings

__all__ = ["EssSettings", "ObservabilitySettings"]
