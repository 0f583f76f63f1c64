"""Chat-bot plugin building blocks: group reminders, MIDI note tools, picture stores, poems and music-quiz playlists."""

__version__ = "0.1.0"