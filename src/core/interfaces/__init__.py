"""Interfaces of the core.

Contracts (Protocol) implemented by concrete adapters.
"""
