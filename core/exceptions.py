"""
Domain errors raised by ledger, wallet and payment services.
Each carries a stable code; config.exceptions renders them as {detail, code, errors}.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class LedgerError(APIException):
    """Base class for tagged fee-ledger errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Fee ledger error.'
    default_code = 'error'


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class ConflictError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict.'
    default_code = 'conflict'


class InvalidInputError(LedgerError):
    default_detail = 'Invalid input.'
    default_code = 'invalid_input'


class InsufficientWalletBalance(InvalidInputError):
    default_detail = 'Wallet balance is too low for this debit.'
    default_code = 'insufficient_wallet_balance'


class AlreadySettledError(LedgerError):
    default_detail = 'Fee is already fully paid.'
    default_code = 'already_settled'


class PropagationError(LedgerError):
    """
    A structure-level batch failed part way. The batch was rolled back;
    failed_ledger_ids names the rows an operator should inspect.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Fee propagation failed; no ledger rows were changed.'
    default_code = 'propagation_failed'

    def __init__(self, detail=None, structure_id=None, failed_ledger_ids=None):
        super().__init__(detail=detail)
        self.structure_id = structure_id
        self.failed_ledger_ids = list(failed_ledger_ids or [])
