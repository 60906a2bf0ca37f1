from tapes.infrastructure.external.sheets.sheets_client import (
    SheetsApiError,
    SheetsClient,
    SheetsCredentials,
)

__all__ = ["SheetsClient", "SheetsCredentials", "SheetsApiError"]
