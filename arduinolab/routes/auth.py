from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, jwt_required
from supabase import AuthError

from arduinolab.auth import current_actor
from arduinolab.storage import StorageError
from arduinolab.supabase_client import get_admin_supabase, get_store, get_supabase

auth_bp = Blueprint('auth', __name__)

PROFILES = 'profiles'


def load_profile(store, user_id):
    rows = store.select(PROFILES, {'id': user_id}, columns='role,full_name', limit=1)
    return rows[0] if rows else {}


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json() or {}
    # Trim whitespace to prevent "Invalid login credentials" on pasted emails
    email = (data.get('email') or '').strip()
    password = data.get('password')

    if not email or not password:
        return jsonify({'error': 'Email and password are required'}), 400

    try:
        response = get_supabase().auth.sign_in_with_password({
            'email': email,
            'password': password,
        })
    except AuthError as e:
        return jsonify({'error': e.message}), 401

    user = response.user
    try:
        profile = load_profile(get_store(), user.id)
    except StorageError as e:
        return jsonify({'error': e.message}), 500

    role = profile.get('role') or 'user'
    access_token = create_access_token(
        identity=user.id,
        additional_claims={'email': user.email, 'role': role},
    )
    return jsonify({
        'access_token': access_token,
        'email': user.email,
        'role': role,
        'full_name': profile.get('full_name'),
    }), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    actor = current_actor()
    return jsonify({'id': actor.id, 'email': actor.email, 'role': actor.role}), 200


@auth_bp.route('/users', methods=['POST'])
@jwt_required()
def create_user():
    """Admins create accounts for instructors; there is no self sign-up"""
    actor = current_actor()
    if not actor.is_admin:
        return jsonify({'success': False, 'message': 'Only admins can create users.'}), 403

    data = request.get_json() or {}
    email = (data.get('email') or '').strip()
    password = data.get('password')
    full_name = (data.get('full_name') or '').strip()
    role = data.get('role') or 'user'

    if not email or not password:
        return jsonify({'success': False, 'message': 'Email and password are required'}), 400
    if role not in ('user', 'admin'):
        return jsonify({'success': False, 'message': f'Unknown role: {role}'}), 400

    try:
        response = get_admin_supabase().auth.admin.create_user({
            'email': email,
            'password': password,
            'email_confirm': True,
            'user_metadata': {'full_name': full_name},
        })
    except AuthError as e:
        return jsonify({'success': False, 'message': e.message}), 400

    try:
        get_store().insert(PROFILES, {
            'id': response.user.id,
            'full_name': full_name,
            'school_name': data.get('school_name'),
            'role': role,
        })
    except StorageError as e:
        return jsonify({'success': False, 'message': e.message}), 500

    return jsonify({'success': True, 'message': 'User created successfully', 'id': response.user.id}), 201
