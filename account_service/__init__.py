"""Username/password account service for the mobile client."""

__version__ = "0.1.0"
