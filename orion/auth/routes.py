import re

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from werkzeug.security import check_password_hash, generate_password_hash

from .. import leaderboard, repository
from ..errors import ValidationFailed
from ..models import DEFAULT_LANGUAGES, LANGUAGES, User, db

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

EMAIL_RE = re.compile(r"^[\w.+-]+@([\w-]+\.)+[\w-]{2,}$")


def text_field(data, key, strip=True):
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailed(f"{key.capitalize()} must be text")
    return value.strip() if strip else value


def validate_languages(languages):
    if not isinstance(languages, list) or not languages:
        raise ValidationFailed("Please select at least one programming language")
    invalid = [lang for lang in languages if lang not in LANGUAGES]
    if invalid:
        raise ValidationFailed(f"Invalid language(s): {', '.join(map(str, invalid))}")
    return languages


def validate_username(username):
    if not 3 <= len(username) <= 20:
        raise ValidationFailed("Username must be between 3 and 20 characters")
    return username


def validate_email(email):
    if not EMAIL_RE.match(email):
        raise ValidationFailed("Please provide a valid email")
    return email


@auth_bp.get("/csrf")
def csrf_token():
    return jsonify(csrfToken=generate_csrf())


@auth_bp.post("/signup")
def signup():
    data = request.get_json(silent=True) or {}
    username = text_field(data, "username")
    email = text_field(data, "email").lower()
    password = text_field(data, "password", strip=False)
    languages = data.get("languages") or DEFAULT_LANGUAGES.split(",")

    if not username or not email or not password:
        raise ValidationFailed("Username, email and password are required.")
    validate_username(username)
    validate_email(email)
    if len(password) < 8:
        raise ValidationFailed("Password must be at least 8 characters")
    validate_languages(languages)
    if User.query.filter_by(username=username).first():
        raise ValidationFailed("Username already exists")
    if User.query.filter_by(email=email).first():
        raise ValidationFailed("Email already exists")

    user = User(username=username, email=email, password_hash=generate_password_hash(password), xp=0)
    user.set_languages(languages)
    with repository.transaction():
        db.session.add(user)
        db.session.flush()
        leaderboard.upsert(user)
    login_user(user, remember=True)
    return jsonify(status="success", data={"user": user.to_dict()}), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    username = text_field(data, "username")
    password = text_field(data, "password", strip=False)
    user = repository.get_player_by_username(username)
    if not user or not check_password_hash(user.password_hash, password):
        return jsonify(status="fail", code="invalid_credentials", message="Invalid credentials."), 401
    if not login_user(user, remember=True):
        return jsonify(status="fail", code="inactive_account", message="This account has been deactivated."), 403
    return jsonify(status="success", data={"user": user.to_dict()})


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify(status="success")


@auth_bp.get("/me")
@login_required
def whoami():
    return jsonify(status="success", data={"user": current_user.to_dict()})
