"""
Tests for authentication and user endpoints.
"""
from app.core.security import create_access_token, decode_access_token, hash_password, verify_password


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "test@example.com",
            "name": "Tester",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "test@example.com"
    assert data["role"] == "user"
    assert "hashed_password" not in data


def test_signup_duplicate_email(client, alice):
    """Test signup rejects an email already in use."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "anotherpassword"}
    )
    assert response.status_code == 409


def test_login(client, alice):
    """Test user login."""
    response = client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "testpassword123"}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert decode_access_token(token)["user_id"] == alice["id"]


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "wrongpassword"}
    )
    assert response.status_code == 401


def test_logout(client, alice):
    """Test logout validates the token."""
    token = alice["headers"]["Authorization"].split(" ")[1]
    assert client.post("/api/auth/logout", params={"token": token}).status_code == 200
    assert client.post("/api/auth/logout", params={"token": "garbage"}).status_code == 401


def test_protected_route_requires_token(client):
    """Test routes reject missing or invalid tokens."""
    assert client.get("/api/users/me").status_code == 401
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_token_for_unknown_user_rejected(client):
    """Test a well-formed token for a missing user is rejected."""
    token = create_access_token(999, "ghost@example.com")
    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_get_and_update_me(client, alice):
    """Test reading and updating the current user's profile."""
    response = client.get("/api/users/me", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["name"] == "Alice"
    
    response = client.put(
        "/api/users/me",
        json={
            "name": "Alice B.",
            "bank_info": {"bank_name": "Vietcombank", "account_number": "1234567890"}
        },
        headers=alice["headers"]
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Alice B."
    assert data["bank_info"]["bank_name"] == "Vietcombank"


def test_password_change_allows_login_with_new_password(client, alice):
    """Test a password update takes effect."""
    response = client.put("/api/users/me", json={"password": "newsecret99"}, headers=alice["headers"])
    assert response.status_code == 200
    
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "newsecret99"})
    assert response.status_code == 200


def test_get_user_by_id(client, alice, bob):
    """Test fetching another user and a missing one."""
    response = client.get(f"/api/users/{bob['id']}", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["email"] == "bob@example.com"
    
    assert client.get("/api/users/9999", headers=alice["headers"]).status_code == 404


def test_list_users_requires_admin(client, db_session, alice):
    """Test only admins can list users."""
    assert client.get("/api/users", headers=alice["headers"]).status_code == 403
    
    from app.models.user import User, UserRole
    user = db_session.query(User).filter(User.id == alice["id"]).first()
    user.role = UserRole.ADMIN
    db_session.commit()
    
    response = client.get("/api/users", headers=alice["headers"])
    assert response.status_code == 200
    assert len(response.json()) == 1


def test_password_hash_roundtrip():
    """Test hashing accepts passwords past bcrypt's 72-byte limit."""
    long_password = "x" * 100
    hashed = hash_password(long_password)
    assert verify_password(long_password, hashed)
    assert not verify_password("x" * 99, hashed)


def test_seed_admin(client, db_session, monkeypatch, alice):
    """Test the init script creates a new admin and promotes an existing user."""
    from app.db import init_db
    from app.models.user import User, UserRole
    monkeypatch.setattr(init_db, "SessionLocal", lambda: db_session)
    
    init_db.seed_admin("root@example.com", "rootpassword")
    init_db.seed_admin("alice@example.com", "ignored")
    
    admins = db_session.query(User).filter(User.role == UserRole.ADMIN).all()
    assert sorted(u.email for u in admins) == ["alice@example.com", "root@example.com"]
    
    response = client.get("/api/users", headers=alice["headers"])
    assert response.status_code == 200
