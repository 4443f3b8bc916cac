# /run.py
import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Now, import the app factory
from healthrecords import create_app
from healthrecords.extensions import socketio

# Create the app instance
app = create_app()

if __name__ == '__main__':
    host = os.getenv('HOST', '127.0.0.1')
    port = int(os.getenv('PORT', 5000))
    print(f"Starting server on {host}:{port}...")
    socketio.run(app, host=host, port=port, debug=app.config.get('DEBUG', False),
                 allow_unsafe_werkzeug=True)
