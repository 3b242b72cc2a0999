"""Secret Santa link generator.

Configure the event, participants and exclusions, then run the script. It
writes a CSV mapping each giver to a private link whose ``data`` parameter
carries their assignment for the reveal page. Run it with a link (or a bare
token) as the only argument to see what that link reveals.
"""

from __future__ import annotations

import csv
import pathlib
import random
import sys
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple
from urllib.parse import urlparse

import allocation
import payload
from payload import Payload

# --- Configuration ---------------------------------------------------------

EVENT_TITLE = "CHRISTMAS 2025"
EVENT_DESCRIPTION = "Gifts under $30. Exchange on December 20th."

# List of participants. Names must be unique, ignoring case.
PARTICIPANTS: List[str] = [
    "Caleb",
    "Chuck",
    "Kelina",
    "Libby",
    "MaryGrace",
    "Laura",
    "John",
]

# One-way exclusions: the giver must not draw any of the listed names.
EXCLUSIONS: Dict[str, List[str]] = {
    "Caleb": ["Kelina"],
}

# Forbidden bidirectional pairs; order in each tuple does not matter.
FORBIDDEN_PAIRS: List[Tuple[str, str]] = [
    ("Chuck", "Laura"),
    ("Libby", "John"),
]

# CSV file where assignment links will be written.
OUTPUT_CSV = pathlib.Path(__file__).parent / "assignments.csv"

# Base URL of the web client; links point at its /play page.
BASE_URL = "https://example.github.io/secret-santa"

INVALID_LINK_MESSAGE = "Invalid or corrupted link."


# --- Validation ------------------------------------------------------------


def normalize_name(name: str) -> str:
    return name.strip()


def merge_exclusions(
    exclusions: Mapping[str, Iterable[str]], pairs: Iterable[Tuple[str, str]]
) -> Dict[str, Set[str]]:
    merged: Dict[str, Set[str]] = {
        normalize_name(giver): {normalize_name(name) for name in names}
        for giver, names in exclusions.items()
    }
    pairs = [(normalize_name(a), normalize_name(b)) for a, b in pairs]
    for giver, names in allocation.exclusions_from_pairs(pairs).items():
        merged.setdefault(giver, set()).update(names)
    return merged


def validate_event(
    title: str,
    participants: Sequence[str],
    exclusions: Mapping[str, Iterable[str]],
) -> None:
    """Raise ``ValueError`` with a user-facing message if the event is unusable."""
    if not title.strip():
        raise ValueError("Event title is required")

    if any(not name.strip() for name in participants):
        raise ValueError("Participant names cannot be empty")

    if len(participants) < 2:
        raise ValueError("At least 2 participants are required")

    lowered = [name.lower() for name in participants]
    if len(set(lowered)) != len(lowered):
        raise ValueError("All participant names must be unique")

    known = set(participants)
    for giver, names in exclusions.items():
        names = set(names)
        if giver in names:
            raise ValueError(f"{giver} cannot exclude themselves")
        unknown = ({giver} | names) - known
        if unknown:
            raise ValueError(
                f"Exclusions mention unknown participants: {sorted(unknown)}"
            )


# --- Pairing logic ---------------------------------------------------------


def generate_pairings(rng: Optional[random.Random] = None) -> Dict[str, str]:
    participants = [normalize_name(name) for name in PARTICIPANTS]
    exclusions = merge_exclusions(EXCLUSIONS, FORBIDDEN_PAIRS)
    validate_event(EVENT_TITLE, participants, exclusions)

    assignments = allocation.allocate(participants, exclusions, rng=rng)
    if assignments is None:
        raise ValueError(
            "Could not generate a valid allocation. Try adjusting exclusions."
        )
    return assignments


def verify_assignments(
    assignments: Dict[str, str],
    participants: List[str],
    exclusions: Optional[Mapping[str, Iterable[str]]] = None,
) -> None:
    participant_set = set(participants)
    giver_set = set(assignments.keys())
    recipient_values = list(assignments.values())
    recipient_set = set(recipient_values)
    exclusions = exclusions or {}

    issues = []

    missing_givers = participant_set - giver_set
    if missing_givers:
        issues.append(f"Missing givers: {sorted(missing_givers)}")

    missing_recipients = participant_set - recipient_set
    if missing_recipients:
        issues.append(f"Missing recipients: {sorted(missing_recipients)}")

    if len(recipient_values) != len(recipient_set):
        issues.append("Duplicate recipients detected")

    extra_givers = giver_set - participant_set
    if extra_givers:
        issues.append(f"Unexpected givers: {sorted(extra_givers)}")

    extra_recipients = recipient_set - participant_set
    if extra_recipients:
        issues.append(f"Unexpected recipients: {sorted(extra_recipients)}")

    self_assigned = sorted(g for g, r in assignments.items() if g == r)
    if self_assigned:
        issues.append(f"Self-assigned givers: {self_assigned}")

    excluded = sorted(
        g for g, r in assignments.items() if r in set(exclusions.get(g, ()))
    )
    if excluded:
        issues.append(f"Excluded recipients drawn by: {excluded}")

    if issues:
        raise ValueError("Assignment verification failed; " + "; ".join(issues))

    # Print a brief summary without revealing pairings.
    print(
        f"Verification passed: {len(giver_set)} givers matched to {len(recipient_set)} recipients."
    )


# --- Link generation -------------------------------------------------------


def build_payloads(
    title: str, description: str, assignments: Mapping[str, str]
) -> List[Payload]:
    return [
        Payload(title.strip(), description.strip(), giver, receiver)
        for giver, receiver in assignments.items()
    ]


def build_assignment_url(record: Payload, base_url: Optional[str] = None) -> str:
    if base_url is None:
        base_url = BASE_URL
    return f"{base_url.rstrip('/')}/play?data={payload.encode(record)}"


def extract_token(link: str) -> str:
    """Return the still-encoded ``data`` value of ``link``, or ``link`` itself."""
    link = link.strip()
    query = urlparse(link).query
    if not query:
        return link

    for part in query.split("&"):
        key, _, value = part.partition("=")
        if key == "data":
            return value
    return ""


def reveal(link: str) -> str:
    record = payload.decode(extract_token(link))
    if record is None:
        return INVALID_LINK_MESSAGE

    lines = [record.title]
    if record.description:
        lines.append(record.description)
    lines.append(f"{record.giver}, you are the Secret Santa for: {record.receiver}")
    return "\n".join(lines)


def write_csv(
    records: Iterable[Payload],
    output_csv: pathlib.Path,
    base_url: Optional[str] = None,
) -> None:
    rows = []
    for record in records:
        rows.append((record.giver, build_assignment_url(record, base_url)))

    with output_csv.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["giver", "url"])
        for giver, url in sorted(rows, key=lambda r: r[0].lower()):
            writer.writerow([giver, url])


# --- Entry point -----------------------------------------------------------


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 1:
        print("Usage: santa.py [LINK]", file=sys.stderr)
        return 1
    if args:
        text = reveal(args[0])
        if text == INVALID_LINK_MESSAGE:
            print(text, file=sys.stderr)
            return 1
        print(text)
        return 0

    try:
        assignments = generate_pairings()
        participants = [normalize_name(name) for name in PARTICIPANTS]
        verify_assignments(
            assignments, participants, merge_exclusions(EXCLUSIONS, FORBIDDEN_PAIRS)
        )
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    records = build_payloads(EVENT_TITLE, EVENT_DESCRIPTION, assignments)
    write_csv(records, OUTPUT_CSV)
    print(f"Wrote {len(records)} assignment links to {OUTPUT_CSV}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
