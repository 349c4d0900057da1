"""
Infrastructure Package
======================

Technical building blocks shared by the bounded contexts (database engine
and session management).
"""
