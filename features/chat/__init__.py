"""Chat domain: ORM models and repositories shared by the personalization features."""
