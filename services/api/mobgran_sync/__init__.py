"""Mobgran offer sync API."""
