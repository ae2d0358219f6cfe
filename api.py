"""
Question and answer REST endpoints.
Routes only translate HTTP to QuestionService calls; every decision is
made in the service and reported through the QnAError handlers.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

api_bp = Blueprint('api', __name__, url_prefix='/api')

SERVICE_KEY = 'qna_service'


def get_service():
    return current_app.extensions[SERVICE_KEY]


def _question_payload():
    """
    (title, contents) from a JSON object. Anything else yields Nones,
    which the service rejects after it has checked the caller.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, None
    return data.get('title'), data.get('contents')


def _answer_contents():
    """
    Answer body may be {"contents": ...}, a bare JSON string, a form
    field, or text/plain. Any other body yields None, which the service
    rejects as INVALID_PAYLOAD after it has checked the caller.
    """
    if request.is_json:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            return data.get('contents')
        if isinstance(data, str):
            return data
        return None
    if request.mimetype in ('application/x-www-form-urlencoded', 'multipart/form-data'):
        return request.form.get('contents')
    if request.mimetype == 'text/plain':
        return request.get_data(as_text=True)
    return None


def _created(resource):
    response = jsonify(resource.to_dict())
    response.status_code = 201
    response.headers['Location'] = resource.generate_resource_uri()
    return response


@api_bp.route('/questions', methods=['GET'])
def list_questions():
    return jsonify([q.to_dict() for q in get_service().list_questions()])


@api_bp.route('/questions', methods=['POST'])
def create_question():
    title, contents = _question_payload()
    question = get_service().create_question(current_user, title, contents)
    return _created(question)


@api_bp.route('/questions/<int:question_id>', methods=['GET'])
def show_question(question_id):
    return jsonify(get_service().get_question(question_id).to_dict())


@api_bp.route('/questions/<int:question_id>', methods=['PUT'])
def update_question(question_id):
    title, contents = _question_payload()
    question = get_service().update_question(current_user, question_id, title, contents)
    return jsonify(question.to_dict())


@api_bp.route('/questions/<int:question_id>', methods=['DELETE'])
def delete_question(question_id):
    get_service().delete_question(current_user, question_id)
    return '', 204


@api_bp.route('/questions/<int:question_id>/answers', methods=['GET'])
def list_answers(question_id):
    return jsonify([a.to_dict() for a in get_service().list_answers(question_id)])


@api_bp.route('/questions/<int:question_id>/answers', methods=['POST'])
def create_answer(question_id):
    answer = get_service().create_answer(current_user, question_id, _answer_contents())
    return _created(answer)


@api_bp.route('/answers/<int:answer_id>', methods=['GET'])
def show_answer(answer_id):
    return jsonify(get_service().get_answer(answer_id).to_dict())


@api_bp.route('/answers/<int:answer_id>', methods=['PUT'])
def update_answer(answer_id):
    answer = get_service().update_answer(current_user, answer_id, _answer_contents())
    return jsonify(answer.to_dict())


@api_bp.route('/answers/<int:answer_id>', methods=['DELETE'])
def delete_answer(answer_id):
    get_service().delete_answer(current_user, answer_id)
    return '', 204
