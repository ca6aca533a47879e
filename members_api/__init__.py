"""
Members API

Backend for the membership area: member profiles, national ID uniqueness and
rank certificate review.
"""

__version__ = "1.0.0"
