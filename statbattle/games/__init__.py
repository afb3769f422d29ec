"""
Games module - Card catalogs for the room engine.

Each catalog is a subpackage exposing a read-only list of Cards that share
the same closed set of stats.
"""
