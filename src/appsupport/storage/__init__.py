"""Persistence layers: the generic SQLite table engine and the settings store."""
