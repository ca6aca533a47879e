"""
Member Profiles Module

Canonical member profiles: normalization, identity reconciliation of legacy
documents, national ID uniqueness, and the rank certificate timeline.
"""
