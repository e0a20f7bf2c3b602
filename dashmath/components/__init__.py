"""
System components for dashmath.

This module provides system-level components for the dashmath system.
"""

from dashmath.components.config import Config, ConfigManager
from dashmath.components.server import Server
