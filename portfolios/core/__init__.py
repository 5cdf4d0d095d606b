"""Ambient services: logging, paths, config files, preferences, frame loop."""
