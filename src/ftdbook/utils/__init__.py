"""Shared helpers for ftdbook."""
