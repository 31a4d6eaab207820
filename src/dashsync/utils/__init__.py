"""Utility helpers for dashsync."""
