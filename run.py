"""
run.py

Development entry point for the weighing form service.

    python run.py

Host and port come from SERVER_HOST / SERVER_PORT (see bascula/config.py).
"""

import uvicorn

from bascula.config import SERVER_HOST, SERVER_PORT


if __name__ == "__main__":
    # Bind to all interfaces by default so phones on the yard network can reach it
    uvicorn.run(
        "bascula.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True
    )
