from flask import request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    get_jwt_identity, get_jwt
)
from sqlalchemy.exc import IntegrityError
from healthrecords.extensions import db
from healthrecords.models.user_models import User
from healthrecords.models.system_models import RevokedToken
from healthrecords.utils.exceptions import NotFoundError, ValidationError
from healthrecords.utils.profile_session import ProfileSession, apply_profile_fields
from healthrecords.utils.store_util import StoreAdapter, StoreKey

def get_current_user():
    """The active user behind the request's JWT, or NotFoundError."""
    user = db.session.get(User, int(get_jwt_identity()))
    if not user or not user.is_active:
        raise NotFoundError("User not found")
    return user

def _issue_tokens(user):
    return {
        'access_token': create_access_token(identity=str(user.id)),
        'refresh_token': create_refresh_token(identity=str(user.id)),
    }

def register_user():
    """Creates an account from the registration form and signs the user in."""
    data = request.get_json(silent=True) or {}

    if not data.get('password'):
        raise ValidationError("Please fill in all required fields", field='password')

    user = User()
    apply_profile_fields(user, data, partial=False)
    try:
        user.set_password(data['password'])
    except ValueError as e:
        raise ValidationError(str(e), field='password')

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Email already registered'}), 409

    session = ProfileSession(user, StoreAdapter(user.id))
    session.remember()
    session.store.write(StoreKey.LANGUAGE_PREFERENCE, user.preferred_language)

    current_app.logger.info(f"User {user.id} registered")
    return jsonify({'message': 'Account created successfully', 'user': user.to_dict(), **_issue_tokens(user)}), 201

def login_user():
    """Handles login using the hashed email lookup."""
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Email and password required'}), 400

    user = User.find_by_email(str(data['email']))
    if not user or not user.check_password(data['password']):
        return jsonify({'error': 'Invalid credentials'}), 401
    if not user.is_active:
        return jsonify({'error': 'Account deactivated'}), 403

    ProfileSession(user, StoreAdapter(user.id)).remember()

    return jsonify({'user': user.to_dict(), **_issue_tokens(user)}), 200

def logout_user():
    """Revokes the token and clears the cached session profile."""
    jti = get_jwt()['jti']
    db.session.add(RevokedToken(jti=jti))
    db.session.commit()

    user = db.session.get(User, int(get_jwt_identity()))
    if user:
        ProfileSession(user, StoreAdapter(user.id)).clear()

    return jsonify({'message': 'Successfully logged out'}), 200

def refresh_token():
    user = get_current_user()
    access_token = create_access_token(identity=str(user.id))
    return jsonify({'access_token': access_token}), 200
