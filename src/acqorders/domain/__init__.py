"""Acquisition order workflows: line reconciliation, inventory, receiving."""
