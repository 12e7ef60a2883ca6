"""shelfshare - rental accrual tools for a peer-to-peer book rental platform."""

__version__ = "0.1.0"
