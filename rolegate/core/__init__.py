"""
Core: configuration, errors, logging, database helpers and interfaces.
"""
