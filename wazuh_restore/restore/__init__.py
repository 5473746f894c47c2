"""Restore orchestration for the Wazuh indexer, dashboard and manager."""
