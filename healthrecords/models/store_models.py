# /healthrecords/models/store_models.py
from datetime import datetime
from healthrecords.extensions import db

class UserStoreEntry(db.Model):
    """One JSON document per (user, key). Backs the per-user store adapter."""
    __tablename__ = 'user_store_entries'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    payload = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User', back_populates='store_entries')

    __table_args__ = (
        db.UniqueConstraint('user_id', 'key', name='unique_user_store_key'),
    )

    def __repr__(self):
        return f'<UserStoreEntry {self.user_id}:{self.key}>'
