"""TokenForge: token deployment records and multisend batches for a single EVM chain."""

__version__ = "1.0.0"
