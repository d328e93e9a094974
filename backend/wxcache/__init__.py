"""Local weather data cache: locations and their daily observations."""

__version__ = "0.1.0"
