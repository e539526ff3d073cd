from passcode.common.exceptions import InternalException


class RepositoryObjectNotFound(InternalException):
    """
    No row matched the clauses of a lookup
    """

    ...


class PreventingModelTruncation(InternalException):
    """
    A delete or update was called without clauses and would have hit every row
    """

    ...
