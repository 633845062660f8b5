"""Translator module for SELinux Translator MCP Server.

This module turns SELinux options into file labels and compares them:
- Encoding of partially-specified SELinux options into file labels
- Conflict detection that treats unspecified fields as incomparable
- Per-field conflict explanations for warning messages

IMPORTANT: The control plane never knows the SELinux defaults of worker nodes.
Nothing in this module may try to fill in missing label fields.
"""
