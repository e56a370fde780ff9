import os
import sys

from entinvoicing import create_app

app = create_app(sys.argv)

# Configure debug mode from environment (default to False)
debug = os.getenv("DEBUG", "False").lower() in {"1", "true", "t", "yes"}
app.debug = debug

if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=debug, threaded=True)
