"""Core types shared by every ircbridge module."""
