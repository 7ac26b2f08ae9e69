from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from arduinolab import comments
from arduinolab.auth import current_actor
from arduinolab.rendering import render_to_dicts
from arduinolab.supabase_client import get_store

comments_bp = Blueprint('comments', __name__)


@comments_bp.route('/project/<project_id>', methods=['GET'])
def list_comments(project_id):
    return jsonify(comments.get_comments(get_store(), project_id)), 200


@comments_bp.route('', methods=['POST'])
@jwt_required()
def add_comment():
    data = request.get_json() or {}
    result = comments.add_comment(get_store(), current_actor(),
                                  data.get('project_id'), data.get('content'))
    return jsonify(result.to_dict()), 201 if result.success else result.status_code


@comments_bp.route('/<comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id):
    result = comments.delete_comment(get_store(), current_actor(), comment_id)
    return jsonify(result.to_dict()), result.status_code


@comments_bp.route('/<comment_id>/like', methods=['POST'])
def toggle_like(comment_id):
    """Public: anonymous visitors like comments with their browser-generated id"""
    data = request.get_json() or {}
    result = comments.toggle_like(get_store(), comment_id, data.get('visitor_id'))
    return jsonify(result.to_dict()), result.status_code


@comments_bp.route('/preview', methods=['POST'])
def preview():
    data = request.get_json() or {}
    content = data.get('content') or ''
    if not isinstance(content, str):
        return jsonify({'error': 'content must be a string'}), 400
    return jsonify({'nodes': render_to_dicts(content)}), 200
