"""Credentialed spreadsheet reader.

Reads every row of the first worksheet as a column-name-addressed mapping
using a Google service account. All three credentials (sheet id, client
email, private key) are required; when any is missing the reader logs the
gap and returns no rows, so every symbol reports "NO DATA" instead of the
refresh failing. Errors talking to the Sheets API are raised as
FeedTransportError.
"""
from __future__ import annotations

import logging
from typing import Any

import gspread
from google.auth.exceptions import GoogleAuthError

from src.config.feed_settings import SheetCredentials
from src.utils.exceptions import FeedTransportError

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"

__all__ = ["TOKEN_URI", "service_account_info", "read_sheet_rows"]


def service_account_info(creds: SheetCredentials) -> dict[str, str]:
    return {
        "type": "service_account",
        "client_email": creds.client_email,
        "private_key": creds.private_key,
        "token_uri": TOKEN_URI,
    }


def read_sheet_rows(creds: SheetCredentials) -> list[dict[str, Any]]:
    """Return all rows of the first worksheet (header row = column names)."""
    missing = creds.missing()
    if missing:
        logger.error("Spreadsheet credentials missing (%s); feed yields no rows", ", ".join(missing))
        return []
    try:
        client = gspread.service_account_from_dict(service_account_info(creds))
        worksheet = client.open_by_key(creds.sheet_id).get_worksheet(0)
        # Keep every cell as text so 8-digit dates are not read back as numbers
        rows = worksheet.get_all_records(numericise_ignore=["all"])
    except (gspread.exceptions.GSpreadException, GoogleAuthError) as e:
        raise FeedTransportError(f"spreadsheet read failed: {e}") from e
    except (OSError, ValueError) as e:
        raise FeedTransportError(f"spreadsheet connection failed: {e}") from e
    logger.info("Retrieved %s rows from spreadsheet %s", len(rows), creds.sheet_id)
    return rows
