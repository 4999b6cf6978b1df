"""TarkovTracker public progress API."""
