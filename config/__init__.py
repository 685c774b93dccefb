"""Settings for the chat personalization backend.

Each subpackage reads its environment variables once at import time:
``database``, ``aws``, ``queue``, ``text``, ``audio``, ``tts`` and
``voice_messages``, plus ``api_keys``, ``environment`` and ``languages``.
"""
