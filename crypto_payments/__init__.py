"""Crypto payment gateway: payment records, QR codes and status notifications."""

__version__ = "0.1.0"
