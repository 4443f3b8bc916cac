# /healthrecords/utils/encryption_util.py
import json
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app

class Encryptor:
    """
    Encrypts and decrypts profile fields at rest.
    It must be initialized with the Flask app to load the key.
    """
    def __init__(self, app=None):
        self.fernet = None
        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initializes the Fernet suite with the key from the app's config."""
        key = app.config.get('HEALTH_ENCRYPTION_KEY')
        if not key:
            raise ValueError("HEALTH_ENCRYPTION_KEY not set in the Flask application config.")

        self.fernet = Fernet(key.encode() if isinstance(key, str) else key)

    def encrypt(self, data: str) -> str:
        """Encrypts a string."""
        if self.fernet is None:
            raise RuntimeError("Encryptor has not been initialized with an app context.")

        if not isinstance(data, str):
            data = str(data)

        encrypted_data = self.fernet.encrypt(data.encode('utf-8'))
        return encrypted_data.decode('utf-8')

    def decrypt(self, token: str) -> Optional[str]:
        """Decrypts an encrypted token string."""
        if self.fernet is None:
            raise RuntimeError("Encryptor has not been initialized with an app context.")

        if not token:
            return None

        try:
            decrypted_data = self.fernet.decrypt(token.encode('utf-8'))
            return decrypted_data.decode('utf-8')
        except InvalidToken:
            current_app.logger.error("Decryption failed: Invalid token provided.")
            return None

    def encrypt_optional(self, data):
        """Encrypts a value, passing empty values through as None."""
        if data is None or data == '':
            return None
        return self.encrypt(data)

    def encrypt_json(self, data: dict) -> str:
        return self.encrypt(json.dumps(data, sort_keys=True))

    def decrypt_json(self, token: str) -> Optional[dict]:
        plain = self.decrypt(token)
        if plain is None:
            return None
        try:
            return json.loads(plain)
        except ValueError:
            current_app.logger.error("Decrypted value is not valid JSON.")
            return None

# Create a single, uninitialized instance to be imported by other modules.
encryptor = Encryptor()
