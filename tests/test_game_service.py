from __future__ import annotations

import random
import threading
from datetime import datetime, timezone

import pytest

from insider.models.game import GameSettings, GameStatus, PlayerRole
from insider.services.errors import InvalidInput, InvalidState
from insider.services.game_service import GameService
from insider.services.words import WORD_LIST

FIXED_NOW = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def service() -> GameService:
    return GameService(rng=random.Random(1234), clock=lambda: FIXED_NOW)


def _lobby(service: GameService, count: int = 4, settings: GameSettings | None = None) -> str:
    """Crée une partie avec `count` joueurs p1..pN et renvoie son code."""
    code = service.create("p1", "Alice", settings).code
    names = ["Bob", "Charlie", "Dana", "Eve", "Frank"]
    for i in range(2, count + 1):
        service.join(f"p{i}", names[i - 2], code)
    return code


def _ready_all(service: GameService, count: int) -> None:
    for i in range(1, count + 1):
        service.set_ready(f"p{i}")


def _game(service: GameService, player_id: str = "p1"):
    return service.registry.find_by_player(player_id)


# ---------------------------------------------------------------------------
# Lecture / appartenance
# ---------------------------------------------------------------------------
def test_get_state_without_game(service):
    state = service.get_state("p1")

    assert state.status == GameStatus.NO_GAME
    assert state.code == ""
    assert state.player_id == "p1"
    assert state.players == []
    assert state.actions == []
    assert state.your_role is None
    assert state.secret_word is None


def test_get_state_without_game_uses_service_clock(service):
    assert service.get_state("p1").last_activity == FIXED_NOW

    service.create("p1", "Alice")
    left = service.leave("p1")

    assert left.status == GameStatus.NO_GAME
    assert left.last_activity == FIXED_NOW


def test_create_game(service):
    state = service.create("p1", "Alice")

    assert state.status == GameStatus.WAITING
    assert len(state.code) == 5
    assert [p.name for p in state.players] == ["Alice"]
    assert state.last_activity == FIXED_NOW
    assert state.settings == GameSettings()


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_rejects_blank_name(service, name):
    with pytest.raises(InvalidInput):
        service.create("p1", name)
    assert service.registry.count() == 0


def test_create_leaves_previous_game(service):
    code = _lobby(service, count=2)

    service.create("p2", "Bob")

    old = service.registry.find_by_code(code)
    assert list(old.players) == ["p1"]
    assert _game(service, "p2").code != code


def test_create_as_sole_member_destroys_previous_game(service):
    first = service.create("p1", "Alice").code
    service.create("p1", "Alice")

    assert service.registry.find_by_code(first) is None
    assert service.registry.count() == 1


def test_create_with_custom_settings(service):
    settings = GameSettings(can_claim_insider=True, guess_time_limit=120)
    state = service.create("p1", "Alice", settings)

    assert state.settings.can_claim_insider is True
    assert state.settings.guess_time_limit == 120


def test_join_is_idempotent(service):
    code = service.create("p1", "Alice").code

    first = service.join("p2", "Bob", code)
    second = service.join("p2", "Bob", code)

    assert len(first.players) == 2
    assert len(second.players) == 2


def test_join_is_case_insensitive(service):
    code = service.create("p1", "Alice").code
    state = service.join("p2", "Bob", code.lower())
    assert state.code == code


def test_join_unknown_code(service):
    with pytest.raises(InvalidInput):
        service.join("p1", "Alice", "ZZZZZ")


def test_join_rejects_blank_name(service):
    code = service.create("p1", "Alice").code
    with pytest.raises(InvalidInput):
        service.join("p2", " ", code)


def test_join_other_game_moves_player(service):
    first = service.create("p1", "Alice").code
    second = service.create("p2", "Bob").code

    service.join("p3", "Charlie", first)
    service.join("p3", "Charlie", second)

    assert "p3" not in service.registry.find_by_code(first).players
    assert "p3" in service.registry.find_by_code(second).players


def test_join_resets_player_record(service):
    code = _lobby(service, count=2)
    service.set_ready("p2", PlayerRole.LEADER)

    other = service.create("p3", "Charlie").code
    service.join("p2", "Bob", other)
    state = service.join("p2", "Bobby", code)

    assert state.your_role is None
    bob = next(p for p in state.players if p.id == "p2")
    assert bob.name == "Bobby"
    assert bob.active is False


def test_leave_last_member_destroys_game(service):
    code = service.create("p1", "Alice").code

    state = service.leave("p1")

    assert state.status == GameStatus.NO_GAME
    with pytest.raises(InvalidInput):
        service.join("p2", "Bob", code)


def test_leave_without_game_is_noop(service):
    assert service.leave("nobody").status == GameStatus.NO_GAME


def test_action_without_game(service):
    with pytest.raises(InvalidInput, match="No game found for player"):
        service.set_ready("p1")


def test_stale_binding_is_repaired(service):
    _lobby(service, count=2)
    game = _game(service, "p2")
    del game.players["p2"]  # incohérence simulée

    with pytest.raises(InvalidInput, match="No game found for player"):
        service.start("p2")
    assert service.registry.find_by_player("p2") is None


# ---------------------------------------------------------------------------
# Salle d'attente
# ---------------------------------------------------------------------------
def test_set_ready_marks_active(service):
    _lobby(service, count=2)

    state = service.set_ready("p1", PlayerRole.LEADER)

    assert state.your_role == PlayerRole.LEADER
    assert next(p for p in state.players if p.id == "p1").active is True


def test_set_ready_second_leader_rejected(service):
    _lobby(service, count=2)
    service.set_ready("p1", PlayerRole.LEADER)

    with pytest.raises(InvalidState, match="already a Leader"):
        service.set_ready("p2", PlayerRole.LEADER)
    assert _game(service).players["p2"].is_active is False


def test_set_ready_same_leader_can_ready_again(service):
    _lobby(service, count=2)
    service.set_ready("p1", PlayerRole.LEADER)
    assert service.set_ready("p1", PlayerRole.LEADER).your_role == PlayerRole.LEADER


def test_set_ready_claims_follow_settings(service):
    _lobby(service, count=2)

    with pytest.raises(InvalidInput):
        service.set_ready("p1", PlayerRole.INSIDER)
    with pytest.raises(InvalidInput):
        service.set_ready("p1", PlayerRole.COMMON)


def test_set_ready_insider_allowed_once(service):
    _lobby(service, count=3, settings=GameSettings(can_claim_insider=True, can_claim_common=True))

    service.set_ready("p1", PlayerRole.INSIDER)
    with pytest.raises(InvalidState, match="already an Insider"):
        service.set_ready("p2", PlayerRole.INSIDER)
    service.set_ready("p2", PlayerRole.COMMON)
    assert service.set_ready("p3", PlayerRole.COMMON).your_role == PlayerRole.COMMON


def test_set_ready_leader_disabled(service):
    _lobby(service, count=2, settings=GameSettings(can_claim_leader=False))
    with pytest.raises(InvalidInput):
        service.set_ready("p1", PlayerRole.LEADER)


def test_set_ready_outside_waiting(service):
    _lobby(service, count=3)
    _ready_all(service, 3)
    service.assign_roles("p1")

    with pytest.raises(InvalidState):
        service.set_ready("p1")


def test_set_not_ready_has_no_phase_check(service):
    _lobby(service, count=3)
    _ready_all(service, 3)
    service.assign_roles("p1")

    state = service.set_not_ready("p2")

    assert state.your_role is None
    assert next(p for p in state.players if p.id == "p2").active is False


# ---------------------------------------------------------------------------
# Attribution des rôles
# ---------------------------------------------------------------------------
def test_assign_roles_three_players_get_distinct_roles(service):
    _lobby(service, count=3)
    _ready_all(service, 3)

    state = service.assign_roles("p1")

    game = _game(service)
    roles = sorted(p.role.value for p in game.players.values())
    assert roles == ["COMMON", "INSIDER", "LEADER"]
    assert state.status == GameStatus.PRE_GAME
    assert game.secret_word in WORD_LIST


def test_assign_roles_respects_claimed_leader(service):
    _lobby(service, count=5)
    service.set_ready("p3", PlayerRole.LEADER)
    for pid in ("p1", "p2", "p4", "p5"):
        service.set_ready(pid)

    service.assign_roles("p1")

    game = _game(service)
    roles = [p.role for p in game.players.values()]
    assert game.players["p3"].role == PlayerRole.LEADER
    assert roles.count(PlayerRole.LEADER) == 1
    assert roles.count(PlayerRole.INSIDER) == 1
    assert roles.count(PlayerRole.COMMON) == 3


def test_assign_roles_keeps_claimed_insider(service):
    _lobby(service, count=4, settings=GameSettings(can_claim_insider=True))
    service.set_ready("p2", PlayerRole.INSIDER)
    for pid in ("p1", "p3", "p4"):
        service.set_ready(pid)

    service.assign_roles("p1")

    game = _game(service)
    roles = [p.role for p in game.players.values()]
    assert game.players["p2"].role == PlayerRole.INSIDER
    assert roles.count(PlayerRole.INSIDER) == 1
    assert roles.count(PlayerRole.LEADER) == 1
    assert roles.count(PlayerRole.COMMON) == 2


def test_assign_roles_with_several_claimed_commons(service):
    _lobby(service, count=5, settings=GameSettings(can_claim_common=True))
    service.set_ready("p2", PlayerRole.COMMON)
    service.set_ready("p3", PlayerRole.COMMON)
    for pid in ("p1", "p4", "p5"):
        service.set_ready(pid)

    service.assign_roles("p1")

    game = _game(service)
    roles = [p.role for p in game.players.values()]
    assert game.players["p2"].role == PlayerRole.COMMON
    assert game.players["p3"].role == PlayerRole.COMMON
    assert roles.count(PlayerRole.LEADER) == 1
    assert roles.count(PlayerRole.INSIDER) == 1
    assert roles.count(PlayerRole.COMMON) == 3


def test_assign_roles_ignores_inactive_players(service):
    _lobby(service, count=4)
    _ready_all(service, 3)

    service.assign_roles("p1")

    game = _game(service)
    assert game.players["p4"].role is None
    assert all(game.players[pid].role is not None for pid in ("p1", "p2", "p3"))


def test_assign_roles_not_enough_players(service):
    _lobby(service, count=2)
    _ready_all(service, 2)

    with pytest.raises(InvalidState, match="Not enough players"):
        service.assign_roles("p1")

    game = _game(service)
    assert game.status == GameStatus.WAITING
    assert game.secret_word is None
    assert all(p.role is None for p in game.players.values())


def test_assign_roles_failure_keeps_claimed_roles(service):
    _lobby(service, count=2)
    service.set_ready("p1", PlayerRole.LEADER)
    service.set_ready("p2")

    with pytest.raises(InvalidState):
        service.assign_roles("p2")
    game = _game(service)
    assert game.players["p1"].role == PlayerRole.LEADER
    assert game.players["p2"].role is None


def test_assign_roles_is_random_but_seedable():
    def draw(seed):
        svc = GameService(rng=random.Random(seed))
        _lobby(svc, count=5)
        _ready_all(svc, 5)
        svc.assign_roles("p1")
        return {pid: p.role for pid, p in _game(svc).players.items()}

    assert draw(99) == draw(99)


# ---------------------------------------------------------------------------
# Manche
# ---------------------------------------------------------------------------
def _in_pre_game(service: GameService) -> str:
    """Partie à 3 joueurs en PRE_GAME avec p1 comme leader. Renvoie l'id de l'insider."""
    _lobby(service, count=3)
    service.set_ready("p1", PlayerRole.LEADER)
    service.set_ready("p2")
    service.set_ready("p3")
    service.assign_roles("p1")
    game = _game(service)
    return next(pid for pid, p in game.players.items() if p.role == PlayerRole.INSIDER)


def test_exchange_word_only_by_leader(service):
    insider = _in_pre_game(service)

    with pytest.raises(InvalidInput, match="leader"):
        service.exchange_word(insider)
    state = service.exchange_word("p1")
    assert state.secret_word in WORD_LIST


def test_exchange_word_outside_pre_game(service):
    _in_pre_game(service)
    service.start("p1")
    with pytest.raises(InvalidState):
        service.exchange_word("p1")


def test_start_by_anyone_stamps_play_time(service):
    insider = _in_pre_game(service)

    state = service.start(insider)

    assert state.status == GameStatus.PLAYING
    assert state.play_start_time == FIXED_NOW


def test_start_requires_pre_game(service):
    _lobby(service, count=3)
    with pytest.raises(InvalidState):
        service.start("p1")


def test_guessed_moves_to_find_insider(service):
    insider = _in_pre_game(service)
    service.start("p1")

    with pytest.raises(InvalidInput):
        service.word_guessed(insider)
    assert service.word_guessed("p1").status == GameStatus.FIND_INSIDER


def test_time_up_moves_to_lost_with_summary(service):
    insider = _in_pre_game(service)
    service.start("p1")

    state = service.time_up("p1")

    assert state.status == GameStatus.LOST
    assert state.summary is not None
    assert state.summary.insider_name == _game(service).players[insider].name


def test_time_up_requires_playing(service):
    _in_pre_game(service)
    with pytest.raises(InvalidState):
        service.time_up("p1")


def test_vote_and_complete(service):
    insider = _in_pre_game(service)
    service.start("p1")
    service.word_guessed("p1")

    service.vote_player("p1", insider)
    service.vote_player("p2", "p1")
    service.vote_player("p2", insider)  # re-vote : écrase
    state = service.complete_voting("p3")

    assert state.status == GameStatus.SUMMARY
    insider_name = _game(service).players[insider].name
    assert state.summary.votes[insider_name] == 2


def test_vote_unknown_player(service):
    _in_pre_game(service)
    service.start("p1")
    service.word_guessed("p1")
    with pytest.raises(InvalidInput):
        service.vote_player("p2", "ghost")


def test_vote_outside_voting_window(service):
    _in_pre_game(service)
    with pytest.raises(InvalidState):
        service.vote_player("p2", "p1")
    with pytest.raises(InvalidState):
        service.complete_voting("p2")


def test_reset_clears_round(service):
    insider = _in_pre_game(service)
    service.start("p1")
    service.word_guessed("p1")
    service.vote_player("p2", insider)

    state = service.reset("p3")

    game = _game(service)
    assert state.status == GameStatus.WAITING
    assert game.secret_word is None
    assert all(p.role is None and not p.is_active and p.accused_id is None for p in game.players.values())


def test_end_always_fails(service):
    with pytest.raises(InvalidState, match="not implemented"):
        service.end("p1")
    _lobby(service, count=3)
    with pytest.raises(InvalidState, match="not implemented"):
        service.end("p1")


def test_full_round_to_summary(service):
    insider = _in_pre_game(service)
    service.exchange_word("p1")
    service.start("p2")
    service.word_guessed("p1")
    for pid in ("p1", "p2", "p3"):
        service.vote_player(pid, insider if pid != insider else "p1")
    state = service.complete_voting("p1")

    assert state.summary.secret_word == _game(service).secret_word
    assert sum(state.summary.votes.values()) == 3


# ---------------------------------------------------------------------------
# Concurrence
# ---------------------------------------------------------------------------
def test_concurrent_leader_claims_keep_single_leader(service):
    _lobby(service, count=6)
    barrier = threading.Barrier(6)
    errors = []

    def claim(pid):
        barrier.wait()
        try:
            service.set_ready(pid, PlayerRole.LEADER)
        except InvalidState as exc:
            errors.append(exc)

    threads = [threading.Thread(target=claim, args=(f"p{i}",)) for i in range(1, 7)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    leaders = [p for p in _game(service).players.values() if p.role == PlayerRole.LEADER]
    assert len(leaders) == 1
    assert len(errors) == 5


def test_concurrent_joins_and_leaves_keep_indexes_consistent(service):
    code = service.create("host", "Host").code

    def churn(pid):
        for _ in range(20):
            service.join(pid, pid, code)
            service.leave(pid)

    threads = [threading.Thread(target=churn, args=(f"p{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    game = service.registry.find_by_code(code)
    assert list(game.players) == ["host"]
    assert all(service.registry.find_by_player(f"p{i}") is None for i in range(8))
