"""Ticket categories."""
