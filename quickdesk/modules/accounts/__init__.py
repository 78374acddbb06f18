"""Account domain: users, roles and credentials."""
