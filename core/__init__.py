"""Shared domain types, settings and infrastructure for dagflow."""
