# /healthrecords/models/health_record_models.py
from datetime import datetime
from healthrecords.extensions import db
from healthrecords.models.enums import RecordStatus, RecordType

class HealthRecord(db.Model):
    """A visit, test or immunization record owned by one user."""
    __tablename__ = 'health_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    type = db.Column(db.String(32), nullable=False, default=RecordType.CHECKUP.value)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    doctor_name = db.Column(db.String(255), nullable=False)
    hospital_name = db.Column(db.String(255))
    date = db.Column(db.String(32), nullable=False)  # ISO date as entered
    next_follow_up = db.Column(db.String(32))
    status = db.Column(db.String(32), nullable=False, default=RecordStatus.COMPLETED.value)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', back_populates='health_records')
    files = db.relationship(
        'HealthFile', back_populates='record', order_by='HealthFile.id', cascade="all, delete-orphan"
    )
    medications = db.relationship(
        'Medication', back_populates='record', order_by='Medication.id', cascade="all, delete-orphan"
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type,
            'title': self.title,
            'description': self.description or '',
            'doctor_name': self.doctor_name,
            'hospital_name': self.hospital_name or '',
            'date': self.date,
            'next_follow_up': self.next_follow_up,
            'status': self.status,
            'files': [f.to_dict() for f in self.files],
            'medications': [m.to_dict() for m in self.medications],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<HealthRecord {self.id}: {self.title} for User {self.user_id}>'

class HealthFile(db.Model):
    """Metadata for a file attached to a record; the bytes live in Cloudinary."""
    __tablename__ = 'health_files'

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(db.Integer, db.ForeignKey('health_records.id'), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False)  # pdf | image | doc
    url = db.Column(db.String(1024), nullable=False)  # Cloudinary secure_url
    storage_path = db.Column(db.String(255), nullable=False)  # Cloudinary public_id
    resource_type = db.Column(db.String(16), nullable=False, default='raw')
    size = db.Column(db.Integer, nullable=False, default=0)
    description = db.Column(db.Text)

    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)

    record = db.relationship('HealthRecord', back_populates='files')

    def to_dict(self):
        return {
            'id': self.id,
            'record_id': self.record_id,
            'name': self.name,
            'type': self.type,
            'url': self.url,
            'size': self.size,
            'size_formatted': self.get_file_size_formatted(),
            'description': self.description or '',
            'uploaded_at': self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

    def get_file_size_formatted(self):
        """Return formatted file size string."""
        if not self.size:
            return 'Unknown'

        size = self.size
        units = ['B', 'KB', 'MB', 'GB']
        unit_index = 0

        while size >= 1024 and unit_index < len(units) - 1:
            size /= 1024
            unit_index += 1

        return f"{size:.1f} {units[unit_index]}"

class Medication(db.Model):
    __tablename__ = 'medications'

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(db.Integer, db.ForeignKey('health_records.id'), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    dosage = db.Column(db.String(255))
    frequency = db.Column(db.String(255))
    duration = db.Column(db.String(255))
    instructions = db.Column(db.Text)
    reminder_times = db.Column(db.JSON, default=list)  # ["08:00", "20:00"]

    record = db.relationship('HealthRecord', back_populates='medications')

    def to_dict(self):
        return {
            'id': self.id,
            'record_id': self.record_id,
            'name': self.name,
            'dosage': self.dosage or '',
            'frequency': self.frequency or '',
            'duration': self.duration or '',
            'instructions': self.instructions or '',
            'reminder_times': list(self.reminder_times or []),
        }
