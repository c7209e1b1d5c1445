"""Systematic Reasoning modules.

Modules:
- core: MCP server, configuration, error codes, instruction text
- ledger: Ticket ledger, reflection log and the cycle coordinator
- search: Fuzzy ranked matching over reflections
"""
