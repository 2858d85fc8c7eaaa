"""Identity directory: user accounts, credentials and session tokens."""
