"""Support utilities (configuration loading)."""
