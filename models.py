from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

CATEGORY_TYPES = ('income', 'expense', 'investment')
CLASSIFICATIONS = ('survival', 'quality', 'pleasure', 'waste')
THEMES = ('light', 'dark')

class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    transactions = db.relationship('Transaction', backref='user', lazy=True)
    settings = db.relationship('UserSettings', backref='user', uselist=False, lazy=True)

class Category(db.Model):
    __tablename__ = 'categories'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    icon = db.Column(db.String(60), nullable=False)  # Lucide icon name
    type = db.Column(db.Enum(*CATEGORY_TYPES, name='category_type'), nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'icon': self.icon, 'type': self.type}

class Transaction(db.Model):
    __tablename__ = 'transactions'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=True, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)  # always non-negative
    # only meaningful for expense categories; the client decides when to send it
    classification = db.Column(db.Enum(*CLASSIFICATIONS, name='classification'), nullable=True)
    note = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)
    category = db.relationship('Category', lazy=True)

class UserSettings(db.Model):
    __tablename__ = 'user_settings'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)
    theme = db.Column(db.Enum(*THEMES, name='theme'), nullable=False, default='dark')
    language = db.Column(db.String(10), nullable=False, default='en')
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_dict(self):
        return {
            'userId': self.user_id,
            'theme': self.theme,
            'language': self.language,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
