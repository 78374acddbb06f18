"""Configuration, security and logging."""
