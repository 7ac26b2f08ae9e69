from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required

from arduinolab.ai_content import (
    AIContentError,
    generate_project_content,
    get_llm_client,
    translate_step,
)

ai_bp = Blueprint('ai', __name__)


def llm_client():
    client = current_app.extensions.get('arduinolab.llm')
    if client is None:
        client = get_llm_client(current_app.config.get('LLM_API_KEY'),
                                current_app.config.get('LLM_BASE_URL'))
    return client


@ai_bp.route('/generate', methods=['POST'])
@jwt_required()
def generate():
    """Expand a project summary into title/description in en, fr and ar"""
    data = request.get_json() or {}
    try:
        content = generate_project_content(llm_client(), data.get('summary'),
                                           model=current_app.config['LLM_MODEL'])
    except AIContentError as e:
        current_app.logger.error("Error generating content: %s", e.message)
        return jsonify({'error': e.message}), e.status
    return jsonify(content), 200


@ai_bp.route('/translate-step', methods=['POST'])
@jwt_required()
def translate():
    data = request.get_json() or {}
    try:
        title, content = translate_step(llm_client(), data.get('title'), data.get('content'),
                                        model=current_app.config['LLM_MODEL'])
    except AIContentError as e:
        current_app.logger.error("Error translating step: %s", e.message)
        return jsonify({'error': e.message}), e.status
    return jsonify({'title': title, 'content': content}), 200
