import time

from jose import jwt

from models.users import User


def test_signup_creates_account(signup, db_session):
    response = signup(fname="Ada", lname="Lovelace")

    assert response.status_code == 201
    assert response.json() == {"message": "User account created successfully!"}

    user = db_session.query(User).filter(User.email == "user@example.com").one()
    assert user.fname == "Ada"
    assert user.lname == "Lovelace"
    assert user.role == "employee"
    assert user.is_admin is False
    assert user.password_hash != "Abcde1"
    assert len(user.user_id) == 32


def test_signup_defaults_optional_fields(signup, db_session):
    assert signup().status_code == 201

    user = db_session.query(User).one()
    assert user.fname == ""
    assert user.lname == ""
    assert user.role == "employee"


def test_signup_keeps_supplied_role(signup, db_session):
    assert signup(role="manager").status_code == 201
    assert db_session.query(User).one().role == "manager"


def test_signup_ignores_admin_flag(signup, login, db_session):
    assert signup(isAdmin=True).status_code == 201

    assert db_session.query(User).one().is_admin is False
    assert login()["isAdmin"] is False


def test_signup_duplicate_email(signup):
    assert signup().status_code == 201

    response = signup(password="Zyxwv9")
    assert response.status_code == 409
    assert "email" in response.json()["fields"]


def test_signup_email_is_case_insensitive(signup):
    assert signup(email="User@Example.com").status_code == 201
    assert signup(email="user@example.com").status_code == 409


def test_signup_weak_password(signup, db_session):
    response = signup(password="abcde1")

    assert response.status_code == 400
    body = response.json()
    assert body["fields"]["password"]["rule"] == "password_policy"
    assert db_session.query(User).count() == 0


def test_signup_invalid_email(signup):
    response = signup(email="not-an-email")

    assert response.status_code == 400
    assert "email" in response.json()["fields"]


def test_signup_email_too_long(signup):
    response = signup(email="a" * 64 + "@" + "b" * 63 + "." + "c" * 63 + "." + "d" * 54 + ".com")

    assert response.status_code == 400
    assert "email" in response.json()["fields"]


def test_signup_missing_password(client):
    response = client.post("/api/user/signup", json={"email": "user@example.com"})

    assert response.status_code == 400
    assert response.json()["fields"]["password"]["rule"] == "missing"


def test_signup_non_string_password(client):
    response = client.post("/api/user/signup", json={"email": "user@example.com", "password": 123456})

    assert response.status_code == 400
    assert "password" in response.json()["fields"]


def test_signup_name_length_limits(signup):
    assert signup(fname="x" * 151).status_code == 400
    assert signup(lname="x" * 101).status_code == 400
    assert signup(fname="x" * 150, lname="y" * 100).status_code == 201


def test_login_returns_token_and_profile(signup, login, settings):
    signup(fname="Ada", lname="Lovelace")

    body = login()

    assert body["email"] == "user@example.com"
    assert body["fName"] == "Ada"
    assert body["lName"] == "Lovelace"
    assert body["isAdmin"] is False
    assert body["message"] == "Welcome Ada!"
    assert "password" not in body

    claims = jwt.decode(body["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["userId"] == body["userId"]
    assert claims["isAdmin"] is False
    assert "exp" in claims


def test_login_token_expires_after_twelve_hours(signup, login, settings):
    signup()
    claims = jwt.get_unverified_claims(login()["token"])
    remaining = claims["exp"] - time.time()
    assert 12 * 3600 - 60 < remaining <= 12 * 3600 + 1


def test_login_wrong_password(client, signup):
    signup()

    response = client.post("/api/user/login", json={"email": "user@example.com", "password": "Wrong123"})

    assert response.status_code == 403
    assert "password" in response.json()["fields"]


def test_login_unknown_email(client):
    response = client.post("/api/user/login", json={"email": "nobody@example.com", "password": "Abcde1"})

    assert response.status_code == 404
    assert "email" in response.json()["fields"]


def test_login_requires_both_fields(client):
    response = client.post("/api/user/login", json={"email": "user@example.com"})
    assert response.status_code == 400

    response = client.post("/api/user/login", json={"password": "Abcde1"})
    assert response.status_code == 400


def test_login_is_throttled_after_repeated_failures(client, signup):
    signup()
    bad = {"email": "user@example.com", "password": "Wrong123"}

    # LOGIN_MAX_ATTEMPTS is 3 in the test settings
    for _ in range(3):
        assert client.post("/api/user/login", json=bad).status_code == 403

    response = client.post("/api/user/login", json={"email": "user@example.com", "password": "Abcde1"})
    assert response.status_code == 429
    assert "Retry-After" in response.headers


def test_successful_login_resets_throttle(client, signup):
    signup()
    bad = {"email": "user@example.com", "password": "Wrong123"}
    good = {"email": "user@example.com", "password": "Abcde1"}

    for _ in range(2):
        client.post("/api/user/login", json=bad)
    assert client.post("/api/user/login", json=good).status_code == 200

    for _ in range(2):
        client.post("/api/user/login", json=bad)
    assert client.post("/api/user/login", json=good).status_code == 200


def test_cors_headers(client):
    response = client.options(
        "/api/user/login",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "PATCH" in response.headers["access-control-allow-methods"]
