"""Ticket lifecycle: creation, updates, comments and ratings."""
