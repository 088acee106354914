"""Version information for neo-auth-client."""

__version__ = "0.1.0"
