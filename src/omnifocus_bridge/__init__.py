"""Bridge between an agent and OmniFocus over AppleScript or the OmniFocus database."""

__version__ = "0.3.0"
