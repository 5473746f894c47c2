"""Wazuh single-node restore tooling."""
