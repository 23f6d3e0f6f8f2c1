class NQueensError(Exception):
    """Raised when a queens instance cannot be set up or solved."""
