"""
Capability Module - Black Box Interface

Purpose: Describe what clients can invoke through the tool protocol
Interface: discover(), resolve()
Hidden: Descriptions, parameter schemas

Exactly one capability is offered: `shell`.
"""

from .capability import (
    SHELL_CAPABILITY,
    CapabilityModule,
    ShellCapability,
    UnknownCapability,
)

__all__ = ["CapabilityModule", "ShellCapability", "UnknownCapability", "SHELL_CAPABILITY"]
