# session_api/wsgi.py
from session_api.main import create_app

app = create_app()

if __name__ == "__main__":
    # gunicorn in production (threaded workers: password hashing blocks only its own request)
    app.run(host="0.0.0.0", port=5000, threaded=True)
