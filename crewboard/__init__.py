"""Crewboard assignment scheduling backend."""
