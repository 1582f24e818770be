"""
LVM Toolkit - LVM management operations exposed as agent-callable tools.

This package translates typed operation requests into lvm2 command lines,
validates them against the legal option space of the lvm2 tools, and guards
irreversible operations behind an explicit confirmation step.
"""

__version__ = "0.6.3"
__all__ = ["api", "cli"]
