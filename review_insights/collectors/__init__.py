"""Storage adapters that produce rating snapshots."""

from .supabase_collector import SupabaseCollector, load_snapshot, save_snapshot

__all__ = ["SupabaseCollector", "load_snapshot", "save_snapshot"]
