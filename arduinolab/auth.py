from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from arduinolab.models import Actor


def current_actor() -> Actor:
    """Actor behind the request; anonymous when no token was sent"""
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if not identity:
        return Actor()
    claims = get_jwt()
    return Actor(id=identity, email=claims.get('email'), role=claims.get('role', 'user'))
