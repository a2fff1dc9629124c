"""
Per-guild key/value storage.

- **guild_storage.py**: collections, items and byte-size accounting for one guild.
- **storage_service.py**: lazy load-or-create registry of guild storage files.
"""
