"""Utility modules for the Note MCP system.

This package contains shared utility functions:
- note_url.py: Note URL parsing and path safety checks
- frontmatter.py: YAML frontmatter parsing/writing
- guard.py: Code-region protection for translation
"""
