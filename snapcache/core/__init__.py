"""Core Application Layer: Orchestrates maintenance use cases.

Connects the CLI entry point with the cache infrastructure.
"""
