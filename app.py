"""Chạy server phát triển: `python app.py` (APP_ENV chọn file cấu hình)."""

import os

from src.workforce_tracker.workforce_tracker.main import create_app


if __name__ == '__main__':
    app = create_app()
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000")), debug=app.config["DEBUG"])
