"""Shared testing utilities for the Note MCP project.

- mock_factories.py: fake Anthropic clients and responses
- test_data.py: collection constants and note URL builder
"""
