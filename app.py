"""
DocCompare - Flask Application
Serves the document comparison API
"""
import os

from flask import Flask, jsonify

from config_logging import APP_NAME, VERSION, get_config, get_logger
from document_compare import dc_blueprint, __version__ as engine_version

logger = get_logger('app')


def create_app(config_overrides=None):
    """Build the Flask app with the comparison blueprint under /api/compare"""
    app = Flask(__name__)
    if config_overrides:
        app.config.update(config_overrides)

    ok, errors = get_config().validate()
    if not ok:
        for error in errors:
            logger.warning(f"Configuration problem: {error}")

    app.register_blueprint(dc_blueprint, url_prefix='/api/compare')

    @app.route('/api/health')
    def health():
        """Liveness probe"""
        return jsonify({
            'status': 'ok',
            'app': APP_NAME,
            'version': VERSION,
            'engine_version': engine_version
        })

    return app


if __name__ == '__main__':
    port = int(os.environ.get('DC_PORT', '5000'))
    print("=" * 60)
    print(f"  {APP_NAME} {VERSION}")
    print(f"  Starting server at http://localhost:{port}")
    print("=" * 60)
    create_app().run(host='0.0.0.0', port=port, debug=False)
