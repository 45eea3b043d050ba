"""
Shared utilities.

- http.py - requests sessions (single-attempt for providers, retrying for jobs)
"""
