"""DevHub: content platform backend (blog, forum, contact intake, accounts)."""

__version__ = "0.1.0"
