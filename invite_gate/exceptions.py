class TransientStoreFailure(Exception):
    """
    The ledger/claim transaction could not complete (connection loss,
    deadlock, serialization failure). The transaction has been rolled back;
    the caller may retry the whole operation.
    """

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
