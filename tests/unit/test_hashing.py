from utils.hashing import bcrypt_context, get_password_hash, verify_password

def test_password_hashing():
    password = "password123"
    hashed = get_password_hash(password)
    assert hashed != password
    assert hashed.startswith("$2b$10$")


def test_password_verification():
    password = "password123"
    hashed = get_password_hash(password)

    assert verify_password(password, hashed) is True
    assert verify_password("wrongpassword1", hashed) is False

    long_pass = "a" * 100
    hashed_long = get_password_hash(long_pass)
    assert verify_password(long_pass, hashed_long) is True


def test_same_password_gets_different_salts():
    first = get_password_hash("password123")
    second = get_password_hash("password123")

    assert first != second
    assert bcrypt_context.verify("password123", first)
    assert bcrypt_context.verify("password123", second)
