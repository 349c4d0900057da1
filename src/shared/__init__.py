"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded
contexts (Intake and Tickets).

Architecture Pattern: Modular Monolith
- Each module (intake, tickets) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add intake or ticket business logic to the shared kernel.
"""

__version__ = "1.0.0"
