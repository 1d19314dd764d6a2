# interview_prep/__main__.py
"""Long-running server: python -m interview_prep"""
import uvicorn

from interview_prep.app import app
from interview_prep.config import server_port
from interview_prep import monitoring

if __name__ == "__main__":
    port = server_port()
    monitoring.logger.info("Backend starting", extra={"port": port})
    uvicorn.run(app, host="0.0.0.0", port=port)
