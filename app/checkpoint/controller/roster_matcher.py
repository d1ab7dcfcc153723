import csv
import io
import logging
from typing import Iterable, Mapping, NamedTuple, Optional

logger = logging.getLogger(__name__)

# Header spellings seen in organizer uploads, tried in this order per field.
ROSTER_FIELD_ALIASES = {
    "name": ("name", "Fullname", "fullName", "fullname"),
    "first_name": ("FirstName", "firstName", "first_name"),
    "last_name": ("LastName", "lastName", "last_name"),
    "email": ("email", "Email", "emailAddress"),
    "membership_number": ("chandaNumber", "ChandaNO", "chandaNo", "chanda_number"),
}

ROSTER_GATED_KINDS = ("member",)


class RosterCandidate(NamedTuple):
    name: Optional[str] = None
    email: Optional[str] = None
    membership_number: Optional[str] = None


def _normalize(value):
    if value is None:
        return ""
    return str(value).strip().lower()


def resolve_field(row: Mapping, field: str):
    """First non-empty value among the aliases of ``field``, or None."""
    for header in ROSTER_FIELD_ALIASES[field]:
        value = row.get(header)
        if value not in (None, ""):
            return value
    return None


def resolve_name(row: Mapping):
    name = resolve_field(row, "name")
    if name:
        return name

    first_name = resolve_field(row, "first_name")
    last_name = resolve_field(row, "last_name")
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return first_name or last_name


def row_matches(row: Mapping, candidate: RosterCandidate):
    row_name = _normalize(resolve_name(row))
    if row_name and row_name == _normalize(candidate.name):
        return True

    row_email = _normalize(resolve_field(row, "email"))
    if row_email and row_email == _normalize(candidate.email):
        return True

    row_number = resolve_field(row, "membership_number")
    if row_number and candidate.membership_number and str(row_number) == str(candidate.membership_number):
        return True

    return False


def matches(roster_uploads: Iterable, candidate: RosterCandidate):
    """True when any row of any upload names the candidate."""
    for upload in roster_uploads:
        for row in upload.member_data or []:
            if row_matches(row, candidate):
                logger.debug(f"Roster match in upload {upload.id}: {row}")
                return True
    return False


def roster_check_required(roster_uploads, kind: str):
    return len(roster_uploads) > 0 and kind in ROSTER_GATED_KINDS


# ------------------ CSV parsing ------------------
def parse_roster_csv(content: str):
    """Parse an uploaded roster into a list of row dicts.

    Header names are kept verbatim (only trimmed) so alias resolution sees the
    organizer's spelling. Blank lines are skipped. Raises ValueError when the
    file has no header or no data rows.
    """
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    if not reader.fieldnames:
        raise ValueError("CSV file must contain a header row")

    rows = []
    for row in reader:
        clean_row = {
            k.strip(): (v or "").strip()
            for k, v in row.items()
            if k and k.strip()
        }
        if not any(clean_row.values()):
            continue
        rows.append(clean_row)

    if not rows:
        raise ValueError("CSV file must contain header and at least one data row")
    return rows
