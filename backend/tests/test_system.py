# Overview: Pytest coverage for health, JSON error handlers and CLI commands.

from sutradhar.extensions import db
from sutradhar.models import Offer, Profile, User
from sutradhar.services import rewards_service


class TestSystemRoutes:
    def test_health(self, client):
        resp = client.get('/api/health')
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"

    def test_unknown_api_path_is_json_404(self, client):
        resp = client.get('/api/does-not-exist')
        assert resp.status_code == 404
        assert "error" in resp.json

    def test_cors_for_dev_origin(self, client):
        resp = client.get('/api/health', headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

        other = client.get('/api/health', headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in other.headers


class TestCli:
    def test_system_init_is_idempotent(self, app):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["system", "init"])
        assert first.exit_code == 0, first.output
        second = runner.invoke(args=["system", "init"])
        assert second.exit_code == 0, second.output

        assert db.session.query(User).filter_by(email="admin@sutradhar.local").count() == 1
        assert {o.code for o in db.session.query(Offer).all()} == {"TEXTILE20", "WELCOME100"}

    def test_users_create(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create", "--email", "maker@example.com", "--password", "Password123",
            "--role", "seller", "--display-name", "Maker",
        ])
        assert "PASS" in result.output
        profile = db.session.query(Profile).join(User).filter(User.email == "maker@example.com").one()
        assert profile.role == "seller"

    def test_offers_create_and_list(self, app):
        runner = app.test_cli_runner()
        created = runner.invoke(args=[
            "offers", "create", "--code", "monsoon15", "--type", "percent", "--value", "15",
            "--min-cart", "1000", "--expires", "2099-01-01T00:00:00Z",
        ])
        assert "PASS" in created.output

        listed = runner.invoke(args=["offers", "list"])
        assert "MONSOON15" in listed.output

    def test_rewards_reconcile(self, app, buyer):
        rewards_service.record_points(buyer.id, 120, rewards_service.LEDGER_EARN)
        profile = db.session.query(Profile).filter_by(user_id=buyer.id).one()
        profile.points = 5
        db.session.commit()

        result = app.test_cli_runner().invoke(args=["rewards", "reconcile", "--user-id", str(buyer.id)])
        assert "5 -> 120" in result.output
        assert db.session.query(Profile).filter_by(user_id=buyer.id).one().points == 120
