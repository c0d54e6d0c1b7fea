from conftest import make_user
from mcq_practice.models.user import User


class TestUserAdministration:
    def test_students_cannot_manage_users(self, student_client):
        assert student_client.get("/api/v1/users/").status_code == 403

    def test_list_filtered_by_role(self, admin_client, student_user):
        response = admin_client.get("/api/v1/users/", params={"role": "student"})
        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["student"]

    def test_approve_pending_registration(self, admin_client, db_session):
        pending = make_user(
            db_session, username="waiting", password="secret1", approved=False, active=False
        )
        listed = admin_client.get("/api/v1/users/pending-approval").json()
        assert [u["id"] for u in listed] == [pending.id]

        response = admin_client.post(f"/api/v1/users/{pending.id}/approve")
        assert response.status_code == 200
        assert response.json()["approved"] is True
        assert response.json()["active"] is True
        assert admin_client.get("/api/v1/users/pending-approval").json() == []

    def test_reject_removes_pending_account(self, admin_client, db_session):
        pending = make_user(
            db_session, username="waiting", password="secret1", approved=False, active=False
        )
        response = admin_client.post(f"/api/v1/users/{pending.id}/reject")
        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(User).filter(User.username == "waiting").first() is None

    def test_reject_approved_user_is_a_conflict(self, admin_client, student_user):
        response = admin_client.post(f"/api/v1/users/{student_user.id}/reject")
        assert response.status_code == 409

    def test_create_user_is_usable_immediately(self, admin_client, client):
        response = admin_client.post(
            "/api/v1/users/",
            json={
                "username": "coadmin",
                "full_name": "Second Admin",
                "email": "coadmin@example.com",
                "role": "admin",
                "password": "secret1",
            },
        )
        assert response.status_code == 201
        assert response.json()["approved"] is True

        login = client.post(
            "/api/v1/auth/login", json={"username": "coadmin", "password": "secret1"}
        )
        assert login.status_code == 200

    def test_update_user(self, admin_client, student_user):
        response = admin_client.put(
            f"/api/v1/users/{student_user.id}", json={"full_name": "Renamed"}
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Renamed"
        assert response.json()["username"] == "student"

    def test_update_to_taken_email(self, admin_client, admin_user, student_user):
        response = admin_client.put(
            f"/api/v1/users/{student_user.id}", json={"email": admin_user.email}
        )
        assert response.status_code == 409

    def test_toggle_active(self, admin_client, student_user):
        response = admin_client.post(f"/api/v1/users/{student_user.id}/toggle-active")
        assert response.json()["active"] is False
        response = admin_client.post(f"/api/v1/users/{student_user.id}/toggle-active")
        assert response.json()["active"] is True

    def test_admin_cannot_deactivate_or_delete_self(self, admin_client, admin_user):
        assert admin_client.post(f"/api/v1/users/{admin_user.id}/toggle-active").status_code == 409
        assert admin_client.delete(f"/api/v1/users/{admin_user.id}").status_code == 409

    def test_delete_user(self, admin_client, student_user):
        assert admin_client.delete(f"/api/v1/users/{student_user.id}").status_code == 204
        assert admin_client.get(f"/api/v1/users/{student_user.id}").status_code == 404

    def test_admin_password_reset(self, admin_client, client, student_user):
        response = admin_client.post(
            f"/api/v1/users/{student_user.id}/reset-password",
            json={"new_password": "fresh-pass"},
        )
        assert response.status_code == 200
        login = client.post(
            "/api/v1/auth/login", json={"username": "student", "password": "fresh-pass"}
        )
        assert login.status_code == 200

    def test_unknown_user(self, admin_client):
        assert admin_client.get("/api/v1/users/999").status_code == 404
