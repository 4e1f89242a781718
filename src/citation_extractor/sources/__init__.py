"""Bibliographic lookup services used to settle pending citations."""
