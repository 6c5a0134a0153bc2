"""friendchat - real-time friends and messaging service."""

__version__ = "1.0.0"
