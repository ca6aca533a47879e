"""
Shared infrastructure for the members service: configuration, exceptions,
hashing and logging utilities used by every module.
"""
