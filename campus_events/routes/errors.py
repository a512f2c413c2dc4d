from fastapi import HTTPException, status

from campus_events.services.ledger import LedgerError

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Please try again later.'


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def ledger_error(exc: LedgerError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={'reason': exc.reason, 'message': exc.message},
    )
