import os

from restaurant_pos import create_app
from restaurant_pos.config import config

app = create_app(config[os.getenv('FLASK_ENV', 'default')])
celery = app.extensions["celery"]


if __name__ == '__main__':
    app.run(host="0.0.0.0", port=int(os.getenv('PORT', 5000)), debug=False)
