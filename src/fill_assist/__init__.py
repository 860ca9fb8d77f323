"""Form-filling assistant: bounded TTL cache and heuristic form-field locator."""

__version__ = "0.1.0"
