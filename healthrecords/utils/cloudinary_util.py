# /healthrecords/utils/cloudinary_util.py
import cloudinary
import cloudinary.uploader
import os
from flask import current_app
from werkzeug.utils import secure_filename
import uuid

from healthrecords.models.enums import FileType

IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'bmp', 'tiff', 'webp'}
PDF_EXTENSIONS = {'pdf'}
DOC_EXTENSIONS = {'doc', 'docx', 'txt', 'rtf', 'odt'}

MAX_RECORD_FILE_BYTES = 10 * 1024 * 1024

class CloudinaryManager:
    """Utility class for storing health record attachments in Cloudinary."""

    def __init__(self, app=None):
        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize Cloudinary with app config."""
        cloudinary.config(
            cloud_name=app.config.get('CLOUDINARY_CLOUD_NAME'),
            api_key=app.config.get('CLOUDINARY_API_KEY'),
            api_secret=app.config.get('CLOUDINARY_API_SECRET'),
            secure=True
        )

    def upload_record_file(self, file, user_id, record_id):
        """
        Upload a record attachment to Cloudinary.

        Args:
            file: werkzeug FileStorage from the request
            user_id: owner of the record
            record_id: record the file is attached to

        Returns:
            dict: 'success' plus 'url', 'public_id', 'file_type', 'bytes',
            'resource_type' on success or 'error' on failure
        """
        if not file or file.filename == '':
            return {'success': False, 'error': 'No file provided'}

        file_type = self.classify(file.filename)
        if file_type is None:
            return {'success': False, 'error': 'File type not allowed'}

        if not self._is_valid_document_size(file):
            return {'success': False, 'error': 'File size exceeds 10MB limit'}

        try:
            unique_filename = f"user_{user_id}_record_{record_id}_{uuid.uuid4().hex}"
            secure_name = secure_filename(unique_filename)

            # Images go through the image pipeline, everything else is stored raw
            resource_type = "image" if file_type is FileType.IMAGE else "raw"

            current_app.logger.info(f"Uploading record file as resource_type '{resource_type}'")

            upload_result = cloudinary.uploader.upload(
                file,
                public_id=secure_name,
                folder="health_records",
                resource_type=resource_type,
                tags=[f"user_{user_id}", f"record_{record_id}"]
            )

            return {
                'success': True,
                'url': upload_result.get('secure_url'),
                'public_id': upload_result.get('public_id'),
                'file_type': file_type.value,
                'bytes': upload_result.get('bytes', 0),
                'resource_type': resource_type
            }

        except Exception as e:
            current_app.logger.error(f"Cloudinary record file upload error: {str(e)}")
            return {'success': False, 'error': 'Failed to upload file'}

    def delete_record_file(self, public_id, resource_type='raw'):
        """
        Delete a record attachment from Cloudinary.

        Returns:
            dict: Contains 'success' and optionally 'error'
        """
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
            return {'success': result.get('result') == 'ok'}
        except Exception as e:
            current_app.logger.error(f"Cloudinary record file delete error: {str(e)}")
            return {'success': False, 'error': 'Failed to delete file'}

    @staticmethod
    def get_file_extension(filename):
        """Extract file extension from filename."""
        if not filename or '.' not in filename:
            return None
        return filename.rsplit('.', 1)[1].lower()

    def classify(self, filename):
        """Map a filename onto pdf/image/doc, or None when the extension is not accepted."""
        extension = self.get_file_extension(filename)
        if extension in PDF_EXTENSIONS:
            return FileType.PDF
        if extension in IMAGE_EXTENSIONS:
            return FileType.IMAGE
        if extension in DOC_EXTENSIONS:
            return FileType.DOC
        return None

    def _is_valid_document_size(self, file):
        """Check if file size is within limits (10MB)."""
        file.seek(0, os.SEEK_END)
        file_size = file.tell()
        file.seek(0)  # Reset file pointer
        return file_size <= MAX_RECORD_FILE_BYTES

# Create a single instance
cloudinary_manager = CloudinaryManager()
