# backend/__main__.py

import os
from backend import _env_flag, app, socketio


def main():
    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', '3001'))
    # set ALLOW_UNSAFE_WERKZEUG=false when a production WSGI server fronts the app
    allow_unsafe = _env_flag('ALLOW_UNSAFE_WERKZEUG', 'true')
    app.logger.info("Voting system running on http://%s:%s", host, port)
    socketio.run(app, host=host, port=port, allow_unsafe_werkzeug=allow_unsafe)


if __name__ == '__main__':
    main()
