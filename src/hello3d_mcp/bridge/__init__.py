from .hub import BrowserHub
from .reconcile import StateReading, format_reading

__all__ = ["BrowserHub", "StateReading", "format_reading"]
