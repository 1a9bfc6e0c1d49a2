class StorageError(Exception):
    """
    A statement or batch failed inside the storage engine.

    The underlying sqlite3 error is chained as __cause__. When raised from a
    batch, nothing in that batch was committed.
    """
    pass
