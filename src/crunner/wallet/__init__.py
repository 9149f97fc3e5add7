"""Wallet - local private-key signing for setter calls."""
