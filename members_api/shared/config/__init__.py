# 📄 File: members_api/shared/config/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Holds the settings that tell the members service which database to talk to
# and how to behave.
#
# 🧪 Purpose (Technical Summary):
# Configuration package exports for settings management and the Supabase
# client manager.

from .settings import get_settings, Settings

__all__ = [
    "get_settings",
    "Settings",
]
