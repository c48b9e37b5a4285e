"""Owner registry: one `owners` row per address in use.

An address is "in use" while at least one natural person, legal entity or
registration document carries it. Those tables hold the address by value, so
the registry is maintained here by reference counting:

- `ensure_owner` before a row starts using an address,
- `release_address` after a row stops using one (deletes the Owner at zero),
- `relocate_party` for a party's address change, which also rewrites the
  address on the party's own documents.

None of these commit. Callers run them inside `db.session_scope()` so the
whole sequence is atomic.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from logging_utils import get_logger
from models.legal_entities import LegalEntity
from models.natural_persons import NaturalPerson
from models.owners import Owner
from models.registration_docs import RegistrationDoc

logger = get_logger(__name__)

# (model, address column) pairs that count as references to an address.
_ADDRESS_USERS = (
    (NaturalPerson, NaturalPerson.address),
    (LegalEntity, LegalEntity.address),
    (RegistrationDoc, RegistrationDoc.address),
)


def _insert_ignore(session: Session, address: str) -> None:
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        stmt = sqlite_insert(Owner).values(address=address)
    elif dialect == "postgresql":
        stmt = pg_insert(Owner).values(address=address)
    else:
        # Generic path: savepoint so a duplicate only undoes this insert.
        try:
            with session.begin_nested():
                session.add(Owner(address=address))
        except IntegrityError:
            logger.debug("Owner row for address already present (concurrent insert)")
        return
    session.execute(stmt.on_conflict_do_nothing(index_elements=["address"]))


def ensure_owner(session: Session, address: str) -> Owner:
    """Find-or-create the Owner row for `address`.

    Conflict-tolerant: relies on the unique constraint on `owners.address`, so
    concurrent requests for the same new address end up with one row.
    """

    with session.no_autoflush:
        existing = session.query(Owner).filter(Owner.address == address).first()
    if existing is not None:
        return existing

    _insert_ignore(session, address)
    owner = session.query(Owner).filter(Owner.address == address).one()
    logger.info("Owner registry: added address owner_id=%s", owner.id)
    return owner


def count_address_references(session: Session, address: str) -> int:
    """Number of party and document rows currently using `address`."""

    # Pending attribute changes must be visible to the counts.
    session.flush()
    total = 0
    for model, column in _ADDRESS_USERS:
        total += int(
            session.query(func.count()).select_from(model).filter(column == address).scalar() or 0
        )
    return total


def release_address(session: Session, address: str | None) -> bool:
    """Delete the Owner row for `address` if nothing references it anymore.

    Returns True when a row was removed.
    """

    if not address:
        return False
    if count_address_references(session, address) > 0:
        return False

    deleted = session.query(Owner).filter(Owner.address == address).delete(synchronize_session="fetch")
    if deleted:
        logger.info("Owner registry: removed orphaned address")
    return bool(deleted)


def swap_address(session: Session, row: Any, new_address: str) -> bool:
    """Point `row.address` at `new_address`, keeping the registry in sync.

    Used for single rows (documents); parties go through `relocate_party`.
    Returns False when the address is unchanged.
    """

    old_address = row.address
    if new_address == old_address:
        return False

    ensure_owner(session, new_address)
    row.address = new_address
    release_address(session, old_address)
    return True


def relocate_party(
    session: Session,
    *,
    party: NaturalPerson | LegalEntity,
    key: str,
    new_address: str | None,
) -> bool:
    """Move a party to `new_address`.

    Steps, all in the caller's transaction:
    1. no-op when the address is omitted or unchanged,
    2. find-or-create Owner(new),
    3. rewrite the address on documents whose owner of record is `key`
       (other documents sharing the old address keep it),
    4. update the party row,
    5. drop Owner rows for the old party address and for every address the
       rewritten documents carried, once nothing uses them anymore.

    Returns True when the address changed.
    """

    old_address = party.address
    if new_address is None or new_address == old_address:
        return False

    ensure_owner(session, new_address)

    # Transferred documents may still sit at a previous owner's address.
    vacated = {old_address}
    vacated.update(
        a
        for (a,) in session.query(RegistrationDoc.address)
        .filter(RegistrationDoc.document_owner == key)
        .distinct()
    )
    vacated.discard(new_address)

    moved = (
        session.query(RegistrationDoc)
        .filter(RegistrationDoc.document_owner == key)
        .update({RegistrationDoc.address: new_address}, synchronize_session="fetch")
    )

    party.address = new_address
    released = 0
    for address in sorted(a for a in vacated if a):
        if release_address(session, address):
            released += 1

    logger.info(
        "Relocated party key=%s documents_updated=%s addresses_released=%s",
        key,
        moved,
        released,
    )
    return True


def addresses_in_use(session: Session) -> set[str]:
    used: set[str] = set()
    for _model, column in _ADDRESS_USERS:
        used.update(a for (a,) in session.execute(select(column).distinct()) if a)
    return used


def rebuild_owner_registry(session: Session) -> dict[str, int]:
    """Recompute the registry from the address columns.

    Adds missing Owner rows and deletes orphaned ones. Returns counts.
    """

    session.flush()
    used = addresses_in_use(session)
    existing = {o.address: o for o in session.query(Owner).all()}

    created = 0
    for address in sorted(used - existing.keys()):
        ensure_owner(session, address)
        created += 1

    deleted = 0
    for address in existing.keys() - used:
        session.delete(existing[address])
        deleted += 1

    session.flush()
    logger.info("Owner registry rebuilt created=%s deleted=%s total=%s", created, deleted, len(used))
    return {"created": created, "deleted": deleted, "total": len(used)}
