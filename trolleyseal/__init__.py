"""Trolley seal checklist backend."""
