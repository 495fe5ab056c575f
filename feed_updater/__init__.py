"""Switchboard feed updater."""
