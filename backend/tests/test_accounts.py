"""
Account tests
- Customer verification code → register / login / profile / logout, password reset
- Driver sign-up → emailed code → approval → login, password reset, device token, admin listings
"""

from datetime import datetime, timedelta, timezone

import pytest

from shipday.models import AuthToken, Driver, Notification, PendingDriver, User, VerificationCode
from shipday.models.driver import DriverStatus, VehicleType
from shipday.models.notification import RecipientType
from shipday.services.auth import hash_password, verify_password

USER_PAYLOAD = {
    "name": "Thandi van der Merwe",
    "email": "Thandi@Example.com",
    "phone": "0831112222",
    "password": "Secret#2024",
}

DRIVER_PAYLOAD = {
    "username": "Sipho Ndlovu",
    "email": "Sipho@Shipday.test",
    "phone": "0821234501",
    "password": "Driver#2024",
    "vehicleType": "bike",
    "vehicleNumber": "ca 123-456",
    "idProof": "uploads/sipho-id.pdf",
}


USER_EMAIL = "thandi@example.com"
DRIVER_EMAIL = "sipho@shipday.test"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _register(client, mailer, payload=None):
    payload = payload or USER_PAYLOAD
    email = payload["email"].strip().lower()
    assert client.post("/api/auth/verification/request", json={"email": email}).status_code == 200
    return client.post("/api/auth/register", json={**payload, "code": mailer.last_code(email)})


def _register_driver(client, mailer, payload=None):
    payload = payload or DRIVER_PAYLOAD
    email = payload["email"].strip().lower()
    assert client.post("/api/driver/register", json=payload).status_code == 200
    return client.post("/api/driver/request-verification", json={"email": email, "code": mailer.last_code(email)})


def _expire_codes(db):
    db.query(VerificationCode).update({VerificationCode.expires_at: datetime.now(timezone.utc) - timedelta(minutes=1)})
    db.commit()


# ==================== Passwords ====================

def test_password_hash_roundtrip():
    hashed = hash_password("Secret#2024")
    assert hashed != "Secret#2024"
    assert verify_password("Secret#2024", hashed)
    assert not verify_password("secret#2024", hashed)


def test_long_passwords_compare_on_first_72_bytes():
    hashed = hash_password("A1#" + "x" * 80)
    assert verify_password("A1#" + "x" * 69 + "different tail", hashed)


# ==================== Customers ====================

def test_register_customer(client, db, mailer):
    response = _register(client, mailer)

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "thandi@example.com"
    assert user["role"] == "customer"
    assert "password" not in user

    welcome = db.query(Notification).filter(Notification.category == "registration").one()
    assert welcome.recipient_type == RecipientType.USER
    assert welcome.recipient_id == user["id"]
    # The code is used up by registration
    assert db.query(VerificationCode).count() == 0


@pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigits!!", "NoSpecial123"])
def test_register_rejects_weak_password(client, password):
    response = client.post("/api/auth/register", json={**USER_PAYLOAD, "password": password, "code": "ABCDE"})
    assert response.status_code == 400


def test_register_duplicate_customer(client, mailer):
    _register(client, mailer)

    response = client.post("/api/auth/register", json={**USER_PAYLOAD, "code": "ABCDE"})
    again = client.post("/api/auth/verification/request", json={"email": USER_EMAIL, "source": "register"})

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"
    assert again.status_code == 400
    assert len(mailer.sent) == 1


def test_login_profile_logout(client, db, mailer):
    _register(client, mailer)

    login = client.post("/api/auth/login", json={"email": "thandi@example.com", "password": "Secret#2024"})
    assert login.status_code == 200
    token = login.json()["token"]

    profile = client.get("/api/auth/profile", headers=_bearer(token))
    assert profile.status_code == 200
    assert profile.json()["user"]["name"] == "Thandi van der Merwe"

    patched = client.patch("/api/auth/profile", json={"location": "Cape Town"}, headers=_bearer(token))
    assert patched.json()["user"]["location"] == "Cape Town"

    assert client.post("/api/auth/logout", headers=_bearer(token)).status_code == 200
    assert db.query(AuthToken).count() == 0
    assert client.get("/api/auth/profile", headers=_bearer(token)).status_code == 401


def test_login_wrong_password(client, mailer):
    _register(client, mailer)

    response = client.post("/api/auth/login", json={"email": "thandi@example.com", "password": "Wrong#2024"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid credentials"}


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer not-a-token"}])
def test_profile_requires_valid_token(client, headers):
    assert client.get("/api/auth/profile", headers=headers).status_code == 401


def test_driver_token_is_not_a_customer_token(client, make_driver, driver_password):
    driver = make_driver()
    token = client.post(
        "/api/driver/login", json={"emailOrPhone": driver.email, "password": driver_password},
    ).json()["token"]

    assert client.get("/api/auth/profile", headers=_bearer(token)).status_code == 401
    assert client.get("/api/driver/me", headers=_bearer(token)).json()["driverId"] == driver.driver_id


def test_customer_listing_counts_orders(client, mailer):
    _register(client, mailer)
    client.post("/api/orders", json={
        "senderName": "Thandi", "senderPhone": "0831112222", "receiverName": "Lerato",
        "receiverPhone": "0833334444", "deliveryAddress": "4 Main Rd", "weight": 1,
    })

    customers = client.get("/api/auth/customers").json()["customers"]

    assert len(customers) == 1
    assert customers[0]["email"] == "thandi@example.com"
    assert customers[0]["totalOrders"] == 1


# ==================== Customer verification codes ====================

def test_verification_code_is_emailed(client, mailer):
    response = client.post("/api/auth/verification/request", json={"email": " Thandi@Example.com "})

    assert response.status_code == 200
    assert mailer.sent[0]["to"] == USER_EMAIL
    assert mailer.sent[0]["subject"] == "Your Verification Code"
    assert "expire in 15 minutes" in mailer.sent[0]["body"]
    code = mailer.last_code(USER_EMAIL)
    assert len(code) == 5 and code == code.upper()


def test_verify_code_checks_without_using_it_up(client, mailer):
    client.post("/api/auth/verification/request", json={"email": USER_EMAIL})
    code = mailer.last_code(USER_EMAIL)

    checked = client.post("/api/auth/verification/verify", json={"email": USER_EMAIL, "code": code.lower()})
    registered = client.post("/api/auth/register", json={**USER_PAYLOAD, "code": code})

    assert checked.status_code == 200
    assert checked.json()["message"] == "Verification successful"
    assert registered.status_code == 201


def test_verify_rejects_wrong_or_missing_code(client, mailer):
    missing = client.post("/api/auth/verification/verify", json={"email": USER_EMAIL, "code": "ABCDE"})
    client.post("/api/auth/verification/request", json={"email": USER_EMAIL})
    wrong = client.post("/api/auth/verification/verify", json={"email": USER_EMAIL, "code": "WRONG"})

    assert missing.status_code == 400
    assert missing.json()["detail"] == "Verification code not found"
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "Invalid verification code"


def test_expired_code_is_rejected_and_deleted(client, db, mailer):
    client.post("/api/auth/verification/request", json={"email": USER_EMAIL})
    code = mailer.last_code(USER_EMAIL)
    _expire_codes(db)

    response = client.post("/api/auth/register", json={**USER_PAYLOAD, "code": code})

    assert response.status_code == 400
    assert response.json()["detail"] == "Verification code expired"
    db.expire_all()
    assert db.query(VerificationCode).count() == 0
    assert db.query(User).count() == 0


def test_register_without_requested_code(client, db):
    response = client.post("/api/auth/register", json={**USER_PAYLOAD, "code": "ABCDE"})

    assert response.status_code == 400
    assert db.query(User).count() == 0


def test_new_code_replaces_previous_one(client, db, mailer):
    client.post("/api/auth/verification/request", json={"email": USER_EMAIL})
    first = mailer.last_code(USER_EMAIL)
    client.post("/api/auth/verification/request", json={"email": USER_EMAIL})
    second = mailer.last_code(USER_EMAIL)

    assert db.query(VerificationCode).count() == 1
    if first != second:
        stale = client.post("/api/auth/verification/verify", json={"email": USER_EMAIL, "code": first})
        assert stale.status_code == 400
    assert client.post("/api/auth/verification/verify", json={"email": USER_EMAIL, "code": second}).status_code == 200


@pytest.mark.parametrize("body, status", [
    ({"email": "not-an-email"}, 400),
    ({"email": USER_EMAIL, "source": "forgot"}, 404),
    ({"email": USER_EMAIL, "source": "other"}, 400),
])
def test_verification_request_rejections(client, mailer, body, status):
    response = client.post("/api/auth/verification/request", json=body)

    assert response.status_code == status
    assert mailer.sent == []


def test_mail_failure_is_reported(client, mailer):
    mailer.fail = True

    response = client.post("/api/auth/verification/request", json={"email": USER_EMAIL})

    assert response.status_code == 502
    assert response.json() == {"detail": "Failed to send verification code"}


# ==================== Customer password reset ====================

def test_customer_password_reset(client, db, mailer):
    _register(client, mailer)
    old_token = client.post("/api/auth/login", json={"email": USER_EMAIL, "password": "Secret#2024"}).json()["token"]

    assert client.post(
        "/api/auth/verification/request", json={"email": USER_EMAIL, "source": "forgot"},
    ).status_code == 200
    response = client.post("/api/auth/reset-password", json={
        "email": USER_EMAIL, "code": mailer.last_code(USER_EMAIL), "newPassword": "Changed#2025",
    })

    assert response.status_code == 200
    assert client.get("/api/auth/profile", headers=_bearer(old_token)).status_code == 401
    assert client.post("/api/auth/login", json={"email": USER_EMAIL, "password": "Secret#2024"}).status_code == 401
    assert client.post("/api/auth/login", json={"email": USER_EMAIL, "password": "Changed#2025"}).status_code == 200
    assert db.query(Notification).filter(Notification.category == "password_reset").count() == 1


def test_customer_password_reset_needs_the_emailed_code(client, db, mailer):
    _register(client, mailer)
    client.post("/api/auth/verification/request", json={"email": USER_EMAIL, "source": "forgot"})

    wrong_code = client.post("/api/auth/reset-password", json={
        "email": USER_EMAIL, "code": "WRONG", "newPassword": "Changed#2025",
    })
    weak = client.post("/api/auth/reset-password", json={
        "email": USER_EMAIL, "code": mailer.last_code(USER_EMAIL), "newPassword": "weak",
    })

    assert wrong_code.status_code == 400
    assert weak.status_code == 400
    assert client.post("/api/auth/login", json={"email": USER_EMAIL, "password": "Secret#2024"}).status_code == 200


# ==================== Drivers ====================

def test_driver_registration_and_approval(client, db, mailer):
    staged = client.post("/api/driver/register", json=DRIVER_PAYLOAD)
    assert staged.status_code == 200
    assert db.query(Driver).count() == 0
    assert mailer.sent[0]["subject"] == "Driver Verification Code"
    code = mailer.last_code(DRIVER_EMAIL)
    assert len(code) == 6 and code.isdigit()

    registered = client.post("/api/driver/request-verification", json={"email": DRIVER_EMAIL, "code": code})
    assert registered.status_code == 201
    driver = registered.json()["driver"]
    assert driver["driverId"] == "DRV001"
    assert driver["status"] == "pending"
    assert driver["email"] == DRIVER_EMAIL
    assert driver["vehicleNumber"] == "CA 123-456"
    assert db.query(PendingDriver).count() == 0

    credentials = {"emailOrPhone": "0821234501", "password": "Driver#2024"}
    assert client.post("/api/driver/login", json=credentials).status_code == 403

    approved = client.patch("/api/admin/drivers/status", json={"driverId": "DRV001", "status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["driver"]["status"] == "approved"

    login = client.post("/api/driver/login", json=credentials)
    assert login.status_code == 200
    assert login.json()["statistics"] == {"assignedDeliveries": 0, "completedDeliveries": 0, "earnings": 0.0}

    categories = [n["category"] for n in client.get("/api/driver/notifications/DRV001").json()["notifications"]]
    assert sorted(categories) == ["login", "registration", "status_update"]


def test_driver_confirmation_with_wrong_code(client, db, mailer):
    client.post("/api/driver/register", json=DRIVER_PAYLOAD)

    response = client.post("/api/driver/request-verification", json={"email": DRIVER_EMAIL, "code": "000000x"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid verification code"
    assert db.query(Driver).count() == 0


def test_driver_confirmation_after_sign_up_expired(client, db, mailer):
    client.post("/api/driver/register", json=DRIVER_PAYLOAD)
    db.query(PendingDriver).update({PendingDriver.created_at: datetime.now(timezone.utc) - timedelta(hours=2)})
    db.commit()

    response = client.post("/api/driver/request-verification", json={
        "email": DRIVER_EMAIL, "code": mailer.last_code(DRIVER_EMAIL),
    })

    assert response.status_code == 400
    assert response.json()["detail"] == "Registration data not found. Please register again."
    db.expire_all()
    assert db.query(PendingDriver).count() == 0
    assert db.query(Driver).count() == 0


def test_driver_sign_up_again_replaces_staged_details(client, db, mailer):
    client.post("/api/driver/register", json=DRIVER_PAYLOAD)
    client.post("/api/driver/register", json={**DRIVER_PAYLOAD, "username": "Sipho N."})

    response = client.post("/api/driver/request-verification", json={
        "email": DRIVER_EMAIL, "code": mailer.last_code(DRIVER_EMAIL),
    })

    assert db.query(PendingDriver).count() == 0
    assert response.json()["driver"]["username"] == "Sipho N."


def test_driver_wrong_password_is_unauthorized_even_when_pending(client, mailer):
    _register_driver(client, mailer)

    response = client.post("/api/driver/login", json={"emailOrPhone": DRIVER_EMAIL, "password": "Wrong#2024"})

    assert response.status_code == 401


def test_driver_duplicate_vehicle_number(client, mailer):
    _register_driver(client, mailer)

    response = client.post("/api/driver/register", json={
        **DRIVER_PAYLOAD, "email": "other@shipday.test", "vehicleNumber": "CA 123-456",
    })

    assert response.status_code == 400
    assert response.json()["detail"] == "Driver already exists with this email or vehicle number"
    assert len(mailer.sent) == 1


def test_driver_register_rejects_unknown_vehicle_type(client):
    response = client.post("/api/driver/register", json={**DRIVER_PAYLOAD, "vehicleType": "boat"})
    assert response.status_code == 400


# ==================== Driver password reset ====================

def test_driver_password_reset(client, db, mailer, make_driver, driver_password):
    driver = make_driver()
    old_token = client.post(
        "/api/driver/login", json={"emailOrPhone": driver.email, "password": driver_password},
    ).json()["token"]

    sent = client.post("/api/driver/forgot-password", json={"email": driver.email.upper()})
    assert sent.status_code == 200
    assert mailer.sent[-1]["subject"] == "Password Reset Code"

    response = client.post("/api/driver/reset-password", json={
        "email": driver.email, "code": mailer.last_code(driver.email), "newPassword": "Rotated#2025",
    })

    assert response.status_code == 200
    assert client.get("/api/driver/me", headers=_bearer(old_token)).status_code == 401
    login = client.post("/api/driver/login", json={"emailOrPhone": driver.email, "password": "Rotated#2025"})
    assert login.status_code == 200
    titles = [n.title for n in db.query(Notification).filter(Notification.category == "password_reset")]
    assert titles == ["Password Reset Successful"]


def test_driver_forgot_password_unknown_email(client, mailer):
    response = client.post("/api/driver/forgot-password", json={"email": "ghost@shipday.test"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Driver not found with this email"
    assert mailer.sent == []


def test_driver_reset_password_without_code(client, make_driver, driver_password):
    driver = make_driver()

    response = client.post("/api/driver/reset-password", json={
        "email": driver.email, "code": "123456", "newPassword": "Rotated#2025",
    })

    assert response.status_code == 400
    assert response.json()["detail"] == "Verification code not found"
    assert client.post(
        "/api/driver/login", json={"emailOrPhone": driver.email, "password": driver_password},
    ).status_code == 200


def test_reject_driver(client, db, make_driver):
    driver = make_driver(status=DriverStatus.PENDING)

    response = client.patch("/api/admin/drivers/status", json={"driverId": driver.driver_id, "status": "rejected"})

    assert response.status_code == 200
    db.expire_all()
    assert db.query(Driver).filter(Driver.driver_id == driver.driver_id).one().status == DriverStatus.REJECTED


def test_driver_status_rejects_other_values(client, make_driver):
    driver = make_driver(status=DriverStatus.PENDING)
    response = client.patch("/api/admin/drivers/status", json={"driverId": driver.driver_id, "status": "pending"})
    assert response.status_code == 400


def test_admin_driver_listings(client, make_driver):
    approved_van = make_driver(vehicle_type=VehicleType.VAN)
    make_driver(vehicle_type=VehicleType.BIKE)
    pending = make_driver(status=DriverStatus.PENDING, vehicle_type=VehicleType.VAN)

    def ids(path):
        return sorted(d["driverId"] for d in client.get(path).json()["drivers"])

    assert len(ids("/api/admin/drivers/all")) == 3
    assert ids("/api/admin/drivers/pending") == [pending.driver_id]
    assert len(ids("/api/admin/drivers/approved")) == 2
    assert ids("/api/admin/drivers/van") == [approved_van.driver_id]


def test_device_token_and_test_push(client, make_driver, push_client):
    driver = make_driver()

    no_token = client.post(f"/api/driver/test-notification/{driver.driver_id}")
    assert no_token.status_code == 400

    assert client.put(f"/api/driver/fcm-token/{driver.driver_id}", json={"fcmToken": "device-9"}).status_code == 200
    sent = client.post(f"/api/driver/test-notification/{driver.driver_id}")

    assert sent.status_code == 200
    assert push_client.sent[0]["token"] == "device-9"
    assert push_client.sent[0]["title"] == "Test Notification"


def test_check_driver(client, make_driver):
    driver = make_driver()
    assert client.get(f"/api/driver/check/{driver.driver_id}").json()["driver"]["driverId"] == driver.driver_id
    assert client.get("/api/driver/check/DRV404").status_code == 404
