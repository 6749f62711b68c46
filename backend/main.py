import os
from ghbuys import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "9000"))
    debug = os.getenv("GHBUYS_ENV", "dev") == "dev"

    app.run(host=host, port=port, debug=debug)
