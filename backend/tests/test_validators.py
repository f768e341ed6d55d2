from app.services.validators import password_strength, validate_email, validate_password


def test_validate_email_accepts_plain_address():
    check = validate_email("ada@example.com")
    assert check.is_valid
    assert check.errors == []


def test_validate_email_rejects_missing_domain():
    check = validate_email("ada@example")
    assert not check.is_valid
    assert "Please enter a valid email address" in check.errors


def test_validate_email_suggests_domain_typo_fix():
    check = validate_email("ada@gmial.com")
    assert not check.is_valid
    assert check.suggestions == ["Did you mean ada@gmail.com?"]


def test_validate_email_rejects_overlong_address():
    check = validate_email("a" * 250 + "@example.com")
    assert "Email address is too long" in check.errors


def test_validate_password_lists_every_missing_rule():
    check = validate_password("abc")
    assert not check.is_valid
    assert "Password must be at least 8 characters long" in check.errors
    assert "Password must contain at least one uppercase letter" in check.errors
    assert "Password must contain at least one number" in check.errors
    assert "Password must contain at least one special character" in check.errors
    assert "Password must contain at least one lowercase letter" not in check.errors


def test_validate_password_rejects_common_password():
    check = validate_password("password")
    assert "Password is too common, please choose a more unique password" in check.errors


def test_validate_password_accepts_strong_password():
    check = validate_password("Sup3r$ecret!")
    assert check.is_valid
    assert check.strength.level in {"strong", "very strong"}


def test_password_strength_levels():
    assert password_strength("abc").level == "weak"
    assert password_strength("abcdefgh1").level == "medium"
    very_strong = password_strength("Abcdefghijklmnop!!123")
    assert very_strong.score == 9
    assert very_strong.level == "very strong"
    assert very_strong.percentage == 100
    assert very_strong.as_dict()["maxScore"] == 9
