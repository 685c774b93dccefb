"""Feature packages: chat persistence, text transformations and voice messages."""
