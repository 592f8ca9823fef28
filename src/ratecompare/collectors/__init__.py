"""Importers for utility interval export files."""
