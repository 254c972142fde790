import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, Iterable

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_PENDING_KEY = "agroshop_changed_tables"


class ChangeFeed:
    """Table-level change notifications for committed writes.

    Subscribers only learn that *something* changed on a table; they are
    expected to re-fetch whatever they display. Each table also carries a
    version counter so HTTP clients can poll for changes.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._versions: Dict[str, int] = defaultdict(int)
        self._subscribers: Dict[str, list] = defaultdict(list)

    def subscribe(self, table: str, callback: Callable[[str], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers[table].append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers[table]:
                    self._subscribers[table].remove(callback)

        return unsubscribe

    def publish(self, tables: Iterable[str]) -> None:
        notify = []
        with self._lock:
            for table in sorted(set(tables)):
                self._versions[table] += 1
                notify.extend((table, cb) for cb in self._subscribers[table])
        for table, callback in notify:
            try:
                callback(table)
            except Exception:
                # a broken subscriber must not undo a committed write
                logger.exception("Change subscriber failed for table %s", table)

    def versions(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._versions)


feed = ChangeFeed()


@event.listens_for(Session, "after_flush")
def _collect_changed_tables(session, flush_context):
    changed = session.info.setdefault(_PENDING_KEY, set())
    for obj in list(session.new) + list(session.dirty) + list(session.deleted):
        table = getattr(obj, "__tablename__", None)
        if table:
            changed.add(table)


@event.listens_for(Session, "after_commit")
def _publish_changed_tables(session):
    changed = session.info.pop(_PENDING_KEY, None)
    if changed:
        feed.publish(changed)


@event.listens_for(Session, "after_rollback")
def _discard_changed_tables(session):
    session.info.pop(_PENDING_KEY, None)
