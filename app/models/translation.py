"""Translation cache and per-viewer display preference models."""

import uuid
from datetime import datetime
from app import db
from app.models.message import utc_isoformat


class Translation(db.Model):
    """A cached machine translation of one message into one language.
    
    At most one row exists per (message_id, source_language, target_language);
    the unique constraint is what resolves concurrent writers, not the
    application code.
    """
    __tablename__ = 'translations'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    message_id = db.Column(
        db.String(36),
        db.ForeignKey('messages.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    source_language = db.Column(db.String(10), nullable=False)
    target_language = db.Column(db.String(10), nullable=False)
    translated_text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    
    __table_args__ = (
        db.UniqueConstraint(
            'message_id', 'source_language', 'target_language',
            name='uq_translations_message_language_pair'
        ),
        db.Index('idx_translations_languages', 'source_language', 'target_language'),
    )
    
    def to_dict(self):
        return {
            'id': self.id,
            'message_id': self.message_id,
            'source_language': self.source_language,
            'target_language': self.target_language,
            'translated_text': self.translated_text,
            'created_at': utc_isoformat(self.created_at)
        }
    
    def __repr__(self):
        return f'<Translation {self.message_id} {self.source_language}->{self.target_language}>'


class TranslationPreference(db.Model):
    """Whether a given viewer sees the original or the translation of a message."""
    __tablename__ = 'translation_preferences'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_role = db.Column(db.String(1), nullable=False)  # 'A' or 'B'
    message_id = db.Column(
        db.String(36),
        db.ForeignKey('messages.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    show_original = db.Column(db.Boolean, nullable=False, default=True)
    target_language = db.Column(db.String(10), nullable=True)
    
    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    __table_args__ = (
        db.UniqueConstraint('user_role', 'message_id', name='uq_translation_preferences_user_message'),
        db.CheckConstraint("user_role IN ('A', 'B')", name='ck_translation_preferences_user_role'),
    )
    
    def to_dict(self):
        return {
            'messageId': self.message_id,
            'showOriginal': self.show_original,
            'targetLanguage': self.target_language
        }
    
    def __repr__(self):
        return f'<TranslationPreference {self.user_role} on {self.message_id}>'
