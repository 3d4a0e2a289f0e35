"""Species catalog: API for species records and comments, plus the client layer."""
