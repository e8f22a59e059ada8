"""splitpr: split one multi-file unified diff into standalone patches."""

__version__ = "0.1.0"
