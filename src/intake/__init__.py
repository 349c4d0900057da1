"""
Intake Module
=============

Bounded Context for the guided intake dialogue.

Responsibilities:
- Present the request catalog and its follow-up questions
- Drive each conversation through its state machine
- Classify the collected answers (summary, priority, difficulty)
- Hand confirmed conversations to the ticket factory
"""

__version__ = "1.0.0"
