from fastapi.testclient import TestClient

from conftest import make_settings
from todo_api.errors import ConflictError, ForbiddenError
from todo_api.main import create_app


def app_with_failing_routes(**settings):
    app = create_app(make_settings(**settings))

    @app.get("/boom")
    def boom():
        raise RuntimeError("database went away")

    @app.get("/forbidden")
    def forbidden():
        raise ForbiddenError()

    @app.get("/conflict")
    def conflict():
        raise ConflictError("Email already in use")

    return app


class TestErrorBoundary:
    def test_unexpected_error_is_server_error_with_stack(self):
        client = TestClient(app_with_failing_routes(), raise_server_exceptions=False)
        res = client.get("/boom")
        assert res.status_code == 500
        body = res.json()
        assert body["message"] == "Internal Server Error"
        assert "RuntimeError: database went away" in body["stack"]

    def test_stack_is_hidden_in_production(self):
        client = TestClient(app_with_failing_routes(environment="production"), raise_server_exceptions=False)
        res = client.get("/boom")
        assert res.status_code == 500
        assert res.json() == {"message": "Internal Server Error"}

    def test_domain_errors_keep_status_and_message(self):
        client = TestClient(app_with_failing_routes())
        forbidden = client.get("/forbidden")
        assert forbidden.status_code == 403
        assert forbidden.json() == {"message": "Forbidden"}

        conflict = client.get("/conflict")
        assert conflict.status_code == 400
        assert conflict.json() == {"message": "Email already in use"}
