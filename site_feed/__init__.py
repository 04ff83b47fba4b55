"""Atom, RSS and JSON feed generation for statically built sites."""
