# blood/legacy.py
"""
One-time normalization of databases written before blood types had their
own table.

Legacy ``donors``, ``recipients`` and ``inventory`` rows carry the blood type
as free text in a ``blood_type`` column. The procedure registers every label
in ``blood_types``, rebuilds the five entity tables with a ``blood_type_id``
reference, copies each row across and swaps the rebuilt tables in.

Everything runs in one transaction. If the process dies before the swap,
the original tables still have the text column, so the next run starts
over and discards the half-built ``*_new`` tables.
"""
import logging
from collections import OrderedDict

from django.db import transaction
from django.utils import timezone

from .models import BloodRequest
from .registry import UNKNOWN_LABEL, is_valid_label, normalize_label

logger = logging.getLogger(__name__)

LEGACY_COLUMN = "blood_type"
LABELLED_TABLES = ("donors", "recipients", "inventory")

BLOOD_TYPES_DDL = """
CREATE TABLE "blood_types" (
    "id" integer NOT NULL PRIMARY KEY AUTOINCREMENT,
    "type" varchar(16) NOT NULL UNIQUE
)"""

# Column definitions of the rebuilt tables, in copy order. Parents first.
NEW_TABLES = OrderedDict([
    ("donors", """
        "id" integer NOT NULL PRIMARY KEY AUTOINCREMENT,
        "name" varchar(120) NOT NULL,
        "phone" varchar(32) NOT NULL,
        "city" varchar(80) NOT NULL,
        "created_at" date NOT NULL,
        "deleted_at" datetime NULL,
        "blood_type_id" bigint NOT NULL REFERENCES "blood_types" ("id") DEFERRABLE INITIALLY DEFERRED"""),
    ("recipients", """
        "id" integer NOT NULL PRIMARY KEY AUTOINCREMENT,
        "name" varchar(120) NOT NULL,
        "phone" varchar(32) NOT NULL,
        "hospital" varchar(120) NOT NULL,
        "created_at" date NOT NULL,
        "deleted_at" datetime NULL,
        "blood_type_id" bigint NOT NULL REFERENCES "blood_types" ("id") DEFERRABLE INITIALLY DEFERRED"""),
    ("donations", """
        "id" integer NOT NULL PRIMARY KEY AUTOINCREMENT,
        "units" integer unsigned NOT NULL CHECK ("units" >= 0),
        "donation_date" date NOT NULL,
        "expiry_date" date NOT NULL,
        "deleted_at" datetime NULL,
        "donor_id" bigint NOT NULL REFERENCES "donors" ("id") DEFERRABLE INITIALLY DEFERRED"""),
    ("requests", """
        "id" integer NOT NULL PRIMARY KEY AUTOINCREMENT,
        "units" integer unsigned NOT NULL CHECK ("units" >= 0),
        "status" varchar(10) NOT NULL,
        "request_date" date NOT NULL,
        "deleted_at" datetime NULL,
        "recipient_id" bigint NOT NULL REFERENCES "recipients" ("id") DEFERRABLE INITIALLY DEFERRED"""),
    ("inventory", """
        "id" integer NOT NULL PRIMARY KEY AUTOINCREMENT,
        "units" integer unsigned NOT NULL CHECK ("units" >= 0),
        "deleted_at" datetime NULL,
        "blood_type_id" bigint NOT NULL UNIQUE REFERENCES "blood_types" ("id") DEFERRABLE INITIALLY DEFERRED"""),
])

# Plain columns carried over as-is, with the value used when the legacy
# table lacks the column or holds NULL there.
COPIED_COLUMNS = {
    "donors": [("id", None), ("name", ""), ("phone", ""), ("city", ""),
               ("created_at", "today"), ("deleted_at", None)],
    "recipients": [("id", None), ("name", ""), ("phone", ""), ("hospital", ""),
                   ("created_at", "today"), ("deleted_at", None)],
    "donations": [("id", None), ("units", 0), ("donation_date", "today"),
                  ("expiry_date", "today"), ("deleted_at", None), ("donor_id", None)],
    "requests": [("id", None), ("units", 0), ("status", "Pending"),
                 ("request_date", "today"), ("deleted_at", None), ("recipient_id", None)],
    "inventory": [("id", None), ("units", 0), ("deleted_at", None)],
}


def _columns(connection, cursor, table):
    return [c.name for c in connection.introspection.get_table_description(cursor, table)]


def has_legacy_columns(connection) -> bool:
    with connection.cursor() as cursor:
        tables = set(connection.introspection.table_names(cursor))
        return any(
            table in tables and LEGACY_COLUMN in _columns(connection, cursor, table)
            for table in LABELLED_TABLES
        )


def normalize_legacy_schema(connection):
    """
    Returns ``{table: rows_copied}`` or ``None`` when there was nothing to do.
    """
    if not has_legacy_columns(connection):
        logger.debug("blood types already normalized on %s", connection.alias)
        return None

    # sqlite only honours the pragma outside a transaction
    with connection.constraint_checks_disabled():
        with transaction.atomic(using=connection.alias):
            with connection.cursor() as cursor:
                report = _rebuild(connection, cursor)

    logger.info("normalized legacy blood types on %s: %s", connection.alias, report)
    return report


def _rebuild(connection, cursor):
    qn = connection.ops.quote_name
    tables = set(connection.introspection.table_names(cursor))

    for table in NEW_TABLES:
        cursor.execute(f"DROP TABLE IF EXISTS {qn(table + '_new')}")

    # 1-2. register every label plus the fallback
    if "blood_types" not in tables:
        cursor.execute(BLOOD_TYPES_DDL)
    labels = {UNKNOWN_LABEL}
    for table in LABELLED_TABLES:
        if table in tables and LEGACY_COLUMN in _columns(connection, cursor, table):
            cursor.execute(f"SELECT DISTINCT {qn(LEGACY_COLUMN)} FROM {qn(table)}")
            labels.update(
                label for label in (normalize_label(row[0]) for row in cursor.fetchall())
                if is_valid_label(label)
            )
    for label in sorted(labels):
        cursor.execute(
            'INSERT INTO "blood_types" ("type") SELECT %s '
            'WHERE NOT EXISTS (SELECT 1 FROM "blood_types" WHERE "type" = %s)',
            [label, label],
        )
    cursor.execute('SELECT "type", "id" FROM "blood_types"')
    refs = dict(cursor.fetchall())

    # 3. replacement tables
    for table, columns in NEW_TABLES.items():
        cursor.execute(f"CREATE TABLE {qn(table + '_new')} ({columns})")

    # 4. copy
    report = {}
    for table in NEW_TABLES:
        if table not in tables:
            report[table] = 0
            continue
        rows = _legacy_rows(connection, cursor, table, refs)
        if table == "inventory":
            rows = _merge_inventory(rows)
        if rows:
            names = [name for name, _ in COPIED_COLUMNS[table]]
            if table in LABELLED_TABLES:
                names.append("blood_type_id")
            cursor.executemany(
                f"INSERT INTO {qn(table + '_new')} ({', '.join(qn(n) for n in names)}) "
                f"VALUES ({', '.join(['%s'] * len(names))})",
                rows,
            )
        report[table] = len(rows)

    # 5. swap, children first so no dropped parent is still referenced
    for table in reversed(NEW_TABLES):
        if table in tables:
            cursor.execute(f"DROP TABLE {qn(table)}")
    for table in NEW_TABLES:
        cursor.execute(f"ALTER TABLE {qn(table + '_new')} RENAME TO {qn(table)}")
    return report


def canonical_status(value):
    """Map free-text legacy statuses onto the request states; anything else is Pending."""
    text = str(value or "").strip().lower()
    for status in BloodRequest.Status.values:
        if status.lower() == text:
            return status
    return BloodRequest.Status.PENDING


def _legacy_rows(connection, cursor, table, refs):
    qn = connection.ops.quote_name
    present = set(_columns(connection, cursor, table))
    wanted = COPIED_COLUMNS[table]
    labelled = table in LABELLED_TABLES
    if labelled:
        label_column = LEGACY_COLUMN if LEGACY_COLUMN in present else "blood_type_id"

    select = [qn(name) if name in present else "NULL" for name, _ in wanted]
    if labelled:
        select.append(qn(label_column) if label_column in present else "NULL")
    cursor.execute(f"SELECT {', '.join(select)} FROM {qn(table)} ORDER BY {qn('id')}")

    today = timezone.localdate().isoformat()
    unknown = refs[UNKNOWN_LABEL]
    valid_refs = set(refs.values())
    rows = []
    for raw in cursor.fetchall():
        row = []
        for (name, default), value in zip(wanted, raw):
            if value is None:
                value = today if default == "today" else default
            if name == "status":
                value = canonical_status(value)
            row.append(value)
        if labelled:
            label = raw[len(wanted)]
            if label_column == LEGACY_COLUMN:
                row.append(refs.get(normalize_label(label), unknown))
            else:
                row.append(label if label in valid_refs else unknown)
        rows.append(row)
    return rows


def _merge_inventory(rows):
    # two legacy spellings of one label ("o+", "O+ ") land on one ref
    merged = OrderedDict()
    for row_id, units, deleted_at, ref in rows:
        if ref not in merged:
            merged[ref] = [row_id, units or 0, deleted_at, ref]
            continue
        current = merged[ref]
        current[1] += units or 0
        if deleted_at is None:
            current[2] = None
    return list(merged.values())
