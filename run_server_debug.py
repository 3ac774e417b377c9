"""Run the API with uvicorn in debug mode (reload + access log)."""

import sys
import io
import os
import socket

# Fix encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

from dotenv import load_dotenv
load_dotenv()


def is_port_in_use(port):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(('localhost', port)) == 0


if __name__ == "__main__":
    port = int(os.getenv("API_PORT", "8000"))

    if is_port_in_use(port):
        print(f"Port {port} is already in use.")
        print("Stop the process holding it or change API_PORT in .env")
        sys.exit(1)

    print("=" * 80)
    print(f"Starting server: http://0.0.0.0:{port}")
    print("=" * 80)

    import uvicorn

    project_root = os.path.dirname(os.path.abspath(__file__))
    package_dir = os.path.join(project_root, "roundtable")

    log_level = os.getenv("UVICORN_LOG_LEVEL", "info")
    try:
        uvicorn.run(
            "roundtable.api.main:app",
            host="0.0.0.0",
            port=port,
            log_level=log_level,
            access_log=True,
            use_colors=True,
            reload=True,
            reload_dirs=[package_dir],
        )
    except KeyboardInterrupt:
        print("\nServer stopped")
