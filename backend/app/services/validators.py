from __future__ import annotations

import re
from dataclasses import dataclass, field

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHARS = r"[!@#$%^&*(),.?\":{}|<>]"
MAX_EMAIL_LENGTH = 254
MIN_PASSWORD_LENGTH = 8

COMMON_PASSWORDS = {
    "password",
    "123456",
    "password123",
    "admin",
    "qwerty",
    "letmein",
    "welcome",
    "monkey",
    "1234567890",
}

COMMON_DOMAIN_TYPOS = {
    "gmail.co": "gmail.com",
    "gmail.con": "gmail.com",
    "gmial.com": "gmail.com",
    "yahoo.co": "yahoo.com",
    "hotmai.com": "hotmail.com",
}


@dataclass
class EmailCheck:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class PasswordStrength:
    score: int
    max_score: int
    level: str
    percentage: int

    def as_dict(self) -> dict[str, int | str]:
        return {"score": self.score, "maxScore": self.max_score, "level": self.level, "percentage": self.percentage}


@dataclass
class PasswordCheck:
    is_valid: bool
    errors: list[str]
    strength: PasswordStrength


def validate_email(email: str) -> EmailCheck:
    errors: list[str] = []
    if not EMAIL_PATTERN.match(email):
        errors.append("Please enter a valid email address")
    if len(email) > MAX_EMAIL_LENGTH:
        errors.append("Email address is too long")

    _, _, domain = email.rpartition("@")
    typo_fix = COMMON_DOMAIN_TYPOS.get(domain.lower()) if domain else None
    suggestions: list[str] = []
    if typo_fix:
        suggestion = f"Did you mean {email[: len(email) - len(domain)]}{typo_fix}?"
        errors.append(suggestion)
        suggestions.append(suggestion)

    return EmailCheck(is_valid=not errors, errors=errors, suggestions=suggestions)


def password_strength(password: str) -> PasswordStrength:
    score = 0
    score += sum(1 for threshold in (8, 12, 16) if len(password) >= threshold)
    score += sum(1 for pattern in (r"[a-z]", r"[A-Z]", r"\d", SPECIAL_CHARS) if re.search(pattern, password))
    if len(re.findall(SPECIAL_CHARS, password)) >= 2:
        score += 1
    if len(re.findall(r"\d", password)) >= 3:
        score += 1

    if score >= 7:
        level = "very strong"
    elif score >= 5:
        level = "strong"
    elif score >= 3:
        level = "medium"
    else:
        level = "weak"
    return PasswordStrength(score=score, max_score=9, level=level, percentage=round(score / 9 * 100))


def validate_password(password: str) -> PasswordCheck:
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not re.search(SPECIAL_CHARS, password):
        errors.append("Password must contain at least one special character")
    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common, please choose a more unique password")

    return PasswordCheck(is_valid=not errors, errors=errors, strength=password_strength(password))
