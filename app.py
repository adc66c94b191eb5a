from __future__ import annotations

import logging
import os

from flask import Flask

from config import CONFIG_FILE, DEFAULT_CONFIG, save_config
from routes import bp

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = Flask(__name__)
app.register_blueprint(bp)


if __name__ == "__main__":
    if not os.path.exists(CONFIG_FILE):
        save_config(dict(DEFAULT_CONFIG))

    app.run(host="0.0.0.0", debug=True, port=5000)
