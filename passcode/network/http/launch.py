from passcode import setup

setup.run()

from passcode.network.http.server import server as http_server  # noqa: E402

# Booted with: uvicorn passcode.network.http.launch:server
server = http_server
