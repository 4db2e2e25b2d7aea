"""FinTrack: credit card invoices, shared expenses and learned merchant categories."""

__version__ = "0.1.0"
