# /healthrecords/models/user_models.py
import hashlib
from datetime import datetime
from healthrecords.extensions import db, bcrypt
from healthrecords.models.enums import Gender, Language, UserType
from healthrecords.utils.encryption_util import encryptor

class User(db.Model):
    """Registered patient. Contact and identity fields are encrypted at rest."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(512), nullable=False)  # Encrypted
    email_hash = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # --- Encrypted profile fields ---
    phone = db.Column(db.String(512), nullable=False)
    abha_id = db.Column(db.String(512))
    date_of_birth = db.Column(db.String(255))
    address = db.Column(db.String(1024))
    emergency_contact = db.Column(db.Text)  # Encrypted JSON {name, phone, relationship}

    # --- Closed choices, stored as their string values ---
    user_type = db.Column(db.String(32), nullable=False, default=UserType.MIGRANT.value)
    preferred_language = db.Column(db.String(8), nullable=False, default=Language.ENGLISH.value)
    gender = db.Column(db.String(16), nullable=False, default=Gender.MALE.value)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, default=True)

    # --- Relationships ---
    audit_logs = db.relationship('AuditLog', backref='user', lazy='dynamic')
    health_records = db.relationship(
        'HealthRecord', back_populates='user', lazy='dynamic', cascade="all, delete-orphan"
    )
    store_entries = db.relationship(
        'UserStoreEntry', back_populates='user', lazy='dynamic', cascade="all, delete-orphan"
    )

    @staticmethod
    def create_hash(value: str) -> str:
        """Creates a SHA-256 hash for a given string."""
        if not value:
            return ""
        return hashlib.sha256(value.strip().lower().encode('utf-8')).hexdigest()

    @classmethod
    def find_by_email(cls, email):
        return cls.query.filter_by(email_hash=cls.create_hash(email)).first()

    def set_email(self, email: str) -> None:
        self.email = encryptor.encrypt(email.strip())
        self.email_hash = self.create_hash(email)

    def set_password(self, password: str) -> None:
        """Hashes and sets the user's password, enforcing complexity rules."""
        if not self._validate_password_strength(password):
            raise ValueError("Password must be at least 8 characters and mix letters and digits")
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password: str) -> bool:
        is_valid = bcrypt.check_password_hash(self.password_hash, password)
        if is_valid:
            self.last_login = datetime.utcnow()
            db.session.commit()
        return is_valid

    def set_emergency_contact(self, contact: dict) -> None:
        contact = contact or {}
        self.emergency_contact = encryptor.encrypt_json({
            'name': contact.get('name', '') or '',
            'phone': contact.get('phone', '') or '',
            'relationship': contact.get('relationship', '') or '',
        })

    def to_dict(self):
        """Serializes the User object to a dictionary for API responses."""
        emergency_contact = encryptor.decrypt_json(self.emergency_contact) if self.emergency_contact else None
        return {
            'id': self.id,
            'name': self.name,
            'email': encryptor.decrypt(self.email) or "[decryption error]",
            'phone': encryptor.decrypt(self.phone),
            'abha_id': encryptor.decrypt(self.abha_id) if self.abha_id else None,
            'user_type': self.user_type,
            'preferred_language': self.preferred_language,
            'date_of_birth': encryptor.decrypt(self.date_of_birth) if self.date_of_birth else None,
            'gender': self.gender,
            'address': encryptor.decrypt(self.address) if self.address else None,
            'emergency_contact': emergency_contact or {'name': '', 'phone': '', 'relationship': ''},
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @staticmethod
    def _validate_password_strength(password: str) -> bool:
        """Validates that a password meets the required complexity."""
        return (isinstance(password, str) and
                len(password) >= 8 and
                any(c.isalpha() for c in password) and
                any(c.isdigit() for c in password))

    def __repr__(self):
        return f'<User {self.id}>'
