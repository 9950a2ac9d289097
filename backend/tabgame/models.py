from tabgame import db


class Record(db.Model):
    """One JSON record of the key-value store, addressed by (kind, key)."""
    __tablename__ = 'record'
    kind = db.Column(db.String(16), primary_key=True)
    key = db.Column(db.String(128), primary_key=True)
    data = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(db.Float, nullable=True)

    def __repr__(self):
        return f'<Record {self.kind}/{self.key}>'
