"""LumiTrack energy consumption tracking backend."""
