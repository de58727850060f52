"""
Helper utility functions shared by the route handlers.
"""

from flask import request, jsonify


def get_request_data():
    """
    Request body as a dict: parsed JSON for JSON requests, form fields for
    multipart/urlencoded ones. Malformed JSON comes back as None so the
    schema rejects it with a 400.
    """
    if request.is_json:
        return request.get_json(silent=True)
    return request.form.to_dict()


def not_found(entity):
    """Standard 404 body, e.g. not_found('Contact')"""
    return jsonify({'error': f'{entity} not found'}), 404


def invalid_id(entity):
    """Standard 400 body for a non-integer path id"""
    return jsonify({'error': f'Invalid {entity} ID'}), 400


def validation_failed(error):
    """400 body for a ValidationError raised by a request schema"""
    return jsonify({'error': error.message, 'details': error.details}), 400
