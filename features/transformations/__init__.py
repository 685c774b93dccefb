"""Text transformations (translate, scale, correct, transcribe) and their per-message cache."""
