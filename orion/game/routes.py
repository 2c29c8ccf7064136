from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from .. import leaderboard, repository
from ..errors import Forbidden, PlayerNotFound, ValidationFailed
from ..evaluator import submit_attempt
from ..selector import has_played_today, public_view, select_challenge

game_bp = Blueprint("game", __name__, url_prefix="/api/game")


@game_bp.get("/daily-challenge")
@login_required
def daily_challenge():
    exclude_types = [t.strip() for t in request.args.get("excludeTypes", "").split(",") if t.strip()]
    require_unique = request.args.get("unique", "").lower() == "true"
    challenge = select_challenge(
        current_user._get_current_object(),
        exclude_types=exclude_types,
        require_unique=require_unique,
        generator=current_app.extensions["orion_generator"],
    )
    view = public_view(challenge, current_app.config["MAX_ATTEMPTS"])
    return jsonify(status="success", data={"challenge": view})


@game_bp.post("/submit")
@login_required
def submit():
    data = request.get_json(silent=True) or {}
    challenge_id = data.get("challengeId")
    answer = data.get("answer")
    if not challenge_id or not answer:
        raise ValidationFailed("Please provide challenge ID and answer")
    if not isinstance(answer, str):
        raise ValidationFailed("Answer must be text")
    result = submit_attempt(
        current_user._get_current_object(),
        challenge_id,
        answer,
        data.get("attemptNumber"),
        verifier=current_app.extensions["orion_verifier"],
    )
    return jsonify(status="success", data=result.to_dict())


@game_bp.get("/leaderboard")
@login_required
def get_leaderboard():
    entries = leaderboard.top_n(current_app.config["LEADERBOARD_SIZE"])
    in_top = any(entry["userId"] == current_user.id for entry in entries)
    user_rank = None if in_top else leaderboard.entry_for(current_user.id)
    return jsonify(status="success", data={"leaderboard": entries, "userRank": user_rank})


@game_bp.get("/stats")
@login_required
def stats():
    return jsonify(
        status="success",
        data={"stats": current_user.to_dict(), "isAdmin": current_user.is_admin},
    )


@game_bp.get("/daily-status")
@login_required
def daily_status():
    return jsonify(
        status="success",
        data={"completed": has_played_today(current_user), "streak": current_user.streak or 0},
    )


@game_bp.post("/admin/reset/<int:player_id>")
@login_required
def reset_player(player_id):
    if not current_user.is_admin:
        raise Forbidden()
    player = repository.get_player(player_id)
    if player is None:
        raise PlayerNotFound("Player not found")
    repository.reset_last_played(player)
    current_app.logger.info("Admin %s reset last play for %s", current_user.username, player.username)
    return jsonify(
        status="success",
        message=f"Successfully reset last play time for {player.username}",
        data={"playerId": player.id, "username": player.username, "lastPlayed": None,
              "resetBy": current_user.username},
    )
