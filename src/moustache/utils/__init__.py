"""Moustache utilities."""
