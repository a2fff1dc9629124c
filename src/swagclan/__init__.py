"""SwagClan: a Discord bot with per-guild settings and storage."""
