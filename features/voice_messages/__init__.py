"""Per-recipient personalization of voice messages."""
