"""Domain services: provider adapters, shipping helpers and chat orchestration."""
