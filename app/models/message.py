"""Message model owned by the chat message store.

The translation subsystem only reads from this table; creating, unsending
and deleting messages happens elsewhere.
"""

import uuid
from datetime import datetime
from app import db


def utc_isoformat(dt):
    """Convert datetime to ISO format with Z suffix to indicate UTC."""
    if dt is None:
        return None
    return dt.isoformat() + 'Z'


class Message(db.Model):
    """A single chat message sent by one of the two participants."""
    
    __tablename__ = 'messages'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sender = db.Column(db.String(1), nullable=False, index=True)  # 'A' or 'B'
    type = db.Column(db.String(20), nullable=False, default='text')  # 'text', 'image', 'voice'
    text = db.Column(db.Text, nullable=True)
    deleted = db.Column(db.Boolean, default=False, nullable=False)
    
    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    
    # Relationships
    translations = db.relationship(
        'Translation',
        backref='message',
        lazy='dynamic',
        cascade='all, delete-orphan',
        passive_deletes=True
    )
    
    def to_dict(self):
        return {
            'id': self.id,
            'sender': self.sender,
            'type': self.type,
            'text': self.text,
            'deleted': self.deleted,
            'created_at': utc_isoformat(self.created_at)
        }
    
    def __repr__(self):
        return f'<Message {self.id} from {self.sender}>'
