"""SatTrack proxy: cached, throttled access to the N2YO satellite API."""

__version__ = "1.0.0"
