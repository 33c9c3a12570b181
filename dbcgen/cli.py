"""
Command-line interface module for dbcgen.
The commands are implemented in __main__.py.
"""

from .__main__ import cli, main

__all__ = ['cli', 'main']
