"""firstslot - gated registration service where the first N verified users win."""

__version__ = "0.1.0"
