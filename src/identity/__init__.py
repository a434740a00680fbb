"""Identity bounded context: user accounts, authentication and bearer-token verification."""
