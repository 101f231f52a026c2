"""Topology reconciliation domain: model, ports, and the reconciliation engine."""
