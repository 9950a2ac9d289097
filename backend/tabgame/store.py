import copy
import time
from typing import Dict, Optional

from tabgame import db
from tabgame.models import Record

KINDS = ('users', 'games', 'rankings')


class RecordStore:
    """Key-value store for users, games and rankings.

    Records are plain JSON-serializable dicts. They are loaded into memory by
    ``open`` and every ``set``/``delete`` is committed to the ``record`` table
    before the in-memory copy changes, so a crash can never lose a write that
    a caller has already seen succeed.
    """

    def __init__(self):
        self._app = None
        self._records: Dict[str, Dict[str, dict]] = {kind: {} for kind in KINDS}

    @property
    def is_open(self) -> bool:
        return self._app is not None

    def open(self, app) -> None:
        self._app = app
        with app.app_context():
            db.create_all()
            rows = Record.query.all()
        self._records = {kind: {} for kind in KINDS}
        for row in rows:
            if row.kind in self._records:
                self._records[row.kind][row.key] = row.data
        app.logger.info(
            f"[store-open] users={len(self._records['users'])} "
            f"games={len(self._records['games'])} rankings={len(self._records['rankings'])}"
        )

    def close(self) -> None:
        self._app = None
        self._records = {kind: {} for kind in KINDS}

    def get(self, kind: str, key: str) -> Optional[dict]:
        record = self._bucket(kind).get(key)
        return copy.deepcopy(record) if record is not None else None

    def set(self, kind: str, key: str, record: dict) -> None:
        bucket = self._bucket(kind)
        with self._app.app_context():
            try:
                db.session.merge(Record(kind=kind, key=key, data=record, updated_at=time.time()))
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        bucket[key] = copy.deepcopy(record)

    def delete(self, kind: str, key: str) -> None:
        bucket = self._bucket(kind)
        if key not in bucket:
            return
        with self._app.app_context():
            try:
                Record.query.filter_by(kind=kind, key=key).delete()
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        bucket.pop(key, None)

    def all(self, kind: str) -> Dict[str, dict]:
        return copy.deepcopy(self._bucket(kind))

    def reset(self) -> None:
        """Drop every record, on disk and in memory."""
        if self._app is None:
            raise RuntimeError('Record store is not open')
        with self._app.app_context():
            db.drop_all()
            db.create_all()
        self._records = {kind: {} for kind in KINDS}

    def _bucket(self, kind: str) -> Dict[str, dict]:
        if self._app is None:
            raise RuntimeError('Record store is not open')
        try:
            return self._records[kind]
        except KeyError:
            raise KeyError(f"Unknown record kind '{kind}'") from None
