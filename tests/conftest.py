import os

# Must be set before app is imported: gevent monkey patching is skipped in threading mode.
os.environ.setdefault('SOCKETIO_ASYNC_MODE', 'threading')

import pytest


@pytest.fixture
def server():
    import app as server_module
    server_module.app.config['TESTING'] = True
    yield server_module
    for match in server_module.local_matches.values():
        match.cancel_pending()
    server_module.local_matches.clear()
    server_module.registry.clear()


@pytest.fixture
def make_client(server):
    clients = []

    def factory():
        client = server.socketio.test_client(server.app)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        if client.is_connected():
            client.disconnect()
