"""Adapters – concrete store integrations."""
