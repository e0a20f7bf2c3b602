"""
Shared utilities for the dashmath package.
"""
