# Entry point: `uvicorn server:app` from the backend directory
from app.main import app
