"""Cache, errors, logging and HTTP observability."""
