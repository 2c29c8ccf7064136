from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, logout_user

from .. import leaderboard, repository
from ..auth.routes import text_field, validate_email, validate_languages, validate_username
from ..errors import ValidationFailed
from ..models import User

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("/me")
@login_required
def me():
    return jsonify(status="success", data={"user": current_user.to_dict()})


@users_bp.patch("/languages")
@login_required
def update_languages():
    data = request.get_json(silent=True) or {}
    languages = validate_languages(data.get("languages"))
    with repository.transaction():
        current_user.set_languages(languages)
    return jsonify(status="success", data={"user": {"languages": current_user.get_lang_list()}})


@users_bp.patch("/profile")
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    username = text_field(data, "username")
    email = text_field(data, "email").lower()

    if username and username != current_user.username:
        validate_username(username)
        if User.query.filter(User.username == username, User.id != current_user.id).first():
            raise ValidationFailed("Username already exists")
    if email and email != current_user.email:
        validate_email(email)
        if User.query.filter(User.email == email, User.id != current_user.id).first():
            raise ValidationFailed("Email already exists")

    with repository.transaction():
        if username:
            current_user.username = username
            leaderboard.rename(current_user.id, username)
        if email:
            current_user.email = email
    return jsonify(
        status="success",
        data={"user": {"username": current_user.username, "email": current_user.email}},
    )


@users_bp.delete("/me")
@login_required
def delete_account():
    with repository.transaction():
        current_user.active = False
        leaderboard.remove(current_user.id)
    logout_user()
    return "", 204
