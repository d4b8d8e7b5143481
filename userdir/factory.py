"""Provides an app factory for the user directory."""

from typing import Any, Mapping, Optional

from flask import Flask, jsonify, Response
from werkzeug.exceptions import BadRequest, HTTPException, \
    InternalServerError, MethodNotAllowed, NotFound, ServiceUnavailable, \
    UnsupportedMediaType

from . import routes, util
from .app_logging import setup_logger
from .domain import RegistrationPolicy
from .services import OriginClassifier
from .tasks import BackgroundTasks


def jsonify_exception(error: HTTPException) -> Response:
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_web_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Initialize and configure the user directory application.

    Parameters
    ----------
    config : dict
        Overrides for values in :mod:`userdir.config`.

    """
    app = Flask('userdir')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)

    setup_logger(app.config['LOG_LEVEL'], json=app.config['LOG_JSON'])
    util.init_app(app)

    # Policy is read once; changing it requires a restart.
    app.extensions['userdir'] = {
        'policy': RegistrationPolicy.from_config(app.config),
        'classifier': OriginClassifier.from_config(app.config),
        'tasks': BackgroundTasks(app.config['BACKGROUND_WORKERS'],
                                 app.config['BACKGROUND_QUEUE_SIZE']),
    }

    app.register_blueprint(routes.blueprint)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(UnsupportedMediaType)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(ServiceUnavailable)(jsonify_exception)

    if app.config['CREATE_DB']:
        with app.app_context():
            util.create_all()

    return app
