"""File uploads stored on local disk."""
