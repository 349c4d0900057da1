"""
Tickets Module
==============

Bounded Context for tickets produced by confirmed intake conversations.

Responsibilities:
- Create exactly one ticket per confirmed conversation (ticket factory)
- Issue collision-free "BI-" ticket numbers
- Ticket lookup by number for requesters
- Administrative listing, statistics and null-coalescing updates
- Static knowledge base for self-service suggestions
"""

__version__ = "1.0.0"
