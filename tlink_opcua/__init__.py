"""
TLINK OPC UA Bridge.

This package mirrors devices and sensors from the TLINK cloud API into
a browsable OPC UA address space, using asyncua for the server and
aiohttp for the API.

Architecture:
    - main.py: Entry point with CLI parsing and signal handling
    - config.py: Configuration loading and validation
    - logging.py: Centralized logging
    - exceptions.py: Error taxonomy
    - types/: Payload models, registry entries and value conversion
    - api/: HTTP client and bearer credential management
    - server/: Server lifecycle, address space, updates and scheduling

Usage:
    python -m tlink_opcua [/d | /debug | /h | /help]
"""

from .main import main

__version__ = "1.0.0"
__all__ = ['main']
