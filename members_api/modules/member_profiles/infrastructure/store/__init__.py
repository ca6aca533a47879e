"""
Document store adapters.
"""

from .memory_store import InMemoryDocumentStore
from .supabase_store import SupabaseDocumentStore

__all__ = ["InMemoryDocumentStore", "SupabaseDocumentStore"]
