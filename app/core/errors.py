import uuid


class PolicyViolation(Exception):
    """
    Raised when a row-level policy rejects an operation.

    Retrying never changes the outcome, so callers surface it directly
    (HTTP 403).
    """

    def __init__(self, table: str, operation: str):
        self.table = table
        self.operation = operation
        super().__init__(f"{operation} on {table} is not allowed for this principal")


class ProfileNotFoundError(Exception):
    """
    A profile row is missing and could not be self-healed
    (no identity available from the auth subsystem).
    """

    def __init__(self, principal_id: uuid.UUID):
        self.principal_id = principal_id
        super().__init__(f"Profile not found for user {principal_id}")
