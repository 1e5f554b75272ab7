"""Main Flask WSGI application hosting the battery tracker."""

from config import Config
from logging_setup import setup_logging
from views import create_app

config = Config.from_env()
setup_logging(config)

app, store, cache_strategy = create_app(testing=False, config=config)


if __name__ == '__main__':
    # the reloader would start a second refresher in the child process
    app.run(port=config.port, debug=True, use_reloader=False)
