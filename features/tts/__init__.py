"""Text-to-speech playback clips."""
