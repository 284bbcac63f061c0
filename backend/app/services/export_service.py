"""Attendee export as a spreadsheet-friendly CSV document."""
import csv
import io
import re

import pytz

from app.config import settings
from app.models.event import Event
from app.models.rsvp import RSVP
from app.utils import ensure_utc

CSV_HEADERS = ["Name", "Email", "RSVP Date", "RSVP Time"]
MISSING_NAME = "No name provided"
UTF8_BOM = "\ufeff"


def export_filename(event: Event) -> str:
    """``<title with non-alphanumerics replaced by _>_attendees.csv``"""
    return f"{re.sub(r'[^A-Za-z0-9]', '_', event.title)}_attendees.csv"


def _row(rsvp: RSVP, tz) -> list[str]:
    created_local = ensure_utc(rsvp.created_at).astimezone(tz)
    return [
        rsvp.user.name or MISSING_NAME,
        rsvp.user.email,
        created_local.strftime("%Y-%m-%d"),
        created_local.strftime("%H:%M:%S"),
    ]


def build_attendees_csv(rsvps: list[RSVP]) -> str:
    """Render RSVPs (already ordered) to CSV text prefixed with a UTF-8 BOM.

    The header row is bare; every data field is double-quoted with embedded
    quotes doubled.
    """
    tz = pytz.timezone(settings.EXPORT_TIMEZONE)
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(_row(rsvp, tz) for rsvp in rsvps)
    # csv.writer terminates every row; keep the document free of a trailing newline
    return UTF8_BOM + buffer.getvalue().rstrip("\n")
