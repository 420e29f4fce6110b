from utils.logger import sanitize_log_data

def test_password_redaction():
    data = {"email": "user@example.com", "newPassword": "supersecret123"}
    sanitized = sanitize_log_data(data)

    assert sanitized["email"] == "user@example.com"
    assert sanitized["newPassword"] == "***REDACTED***"


def test_token_partial_redaction():
    data = {"refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.long_token_here"}
    sanitized = sanitize_log_data(data)

    assert sanitized["refresh_token"] == data["refresh_token"][:8] + "..."
    assert "long_token_here" not in sanitized["refresh_token"]


def test_short_token_fully_redacted():
    sanitized = sanitize_log_data({"token": "abc"})

    assert sanitized["token"] == "***REDACTED***"


def test_nested_dict_sanitization():
    data = {
        "body": {
            "email": "user@example.com",
            "password": "secret123"
        }
    }
    sanitized = sanitize_log_data(data)

    assert sanitized["body"]["email"] == data["body"]["email"]
    assert sanitized["body"]["password"] == "***REDACTED***"
    assert data["body"]["password"] == "secret123"


def test_non_sensitive_data_unchanged():
    data = {"user_id": "42", "email": "test@example.com", "roles": ["USER"]}
    sanitized = sanitize_log_data(data)

    assert sanitized == data
