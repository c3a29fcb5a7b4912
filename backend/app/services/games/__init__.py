"""Game domain services: prize ledger, pricing and read-only views.

This package contains the domain logic that HTTP routes import, keeping
transport concerns separated from the game lifecycle and prize accounting.
"""
