"""Ambient configuration and logging for the moderation registry."""
