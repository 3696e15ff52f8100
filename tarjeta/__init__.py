"""Digital business card backend: vCard downloads and GoHighLevel contact sync."""

__version__ = "0.1.0"
