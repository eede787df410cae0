import hmac

import pytest

from netsession import matcher
from netsession.credentials import extract
from netsession.matcher import PrincipalConfig, entry_problem, evaluate, tokens_equal
from netsession.session import derive_session_id
from netsession.types import Ambiguous, Authenticated, ConfigError, NoCredential, NoMatch

BOT = {"username": "Bot", "token": "secret", "ip_ranges": ["127.0.0.1"]}


def test_authenticates_single_match() -> None:
    outcome = evaluate("secret", "127.0.0.1", [BOT], "wiki")
    assert isinstance(outcome, Authenticated)
    assert outcome.username == "Bot"
    assert outcome.session_id == derive_session_id("wiki", "Bot", "secret")
    assert outcome.index == 0


def test_header_scenarios() -> None:
    table = [BOT]
    token = extract("NetworkSession secret")
    assert isinstance(evaluate(token, "127.0.0.1", table, "wiki"), Authenticated)
    assert evaluate(token, "10.0.0.1", table, "wiki") == NoMatch()
    assert evaluate(extract("NetworkSession wrong"), "127.0.0.1", table, "wiki") == NoMatch()
    assert evaluate(token, "127.0.0.1", [BOT, BOT], "wiki") == Ambiguous(first=0, second=1)


def test_no_credential_ignores_table() -> None:
    broken = [{"token": 5}, "garbage", None]
    assert evaluate(None, "127.0.0.1", broken, "wiki") == NoCredential()
    assert evaluate(None, "127.0.0.1", [BOT, BOT], "wiki") == NoCredential()


def test_config_error_after_match() -> None:
    broken = {"username": "Phpunit", "token": "example"}
    outcome = evaluate("secret", "127.0.0.1", [BOT, broken], "wiki")
    assert outcome == ConfigError(kind="ip_ranges", index=1)
    assert outcome.entry is broken
    assert outcome.code == "networksession-invalid-config-ip-ranges"


def test_first_structural_error_wins() -> None:
    table = [
        BOT,
        {"username": "A", "ip_ranges": []},
        {"token": "t", "ip_ranges": []},
    ]
    assert evaluate("secret", "127.0.0.1", table, "wiki") == ConfigError(kind="token", index=1)


def test_config_error_precedes_later_ambiguity() -> None:
    table = [BOT, {"username": "", "token": "x", "ip_ranges": []}, BOT]
    assert evaluate("secret", "127.0.0.1", table, "wiki") == ConfigError(kind="username", index=1)


def test_ambiguity_precedes_later_config_error() -> None:
    table = [BOT, BOT, {"username": "Broken"}]
    assert evaluate("secret", "127.0.0.1", table, "wiki") == Ambiguous(first=0, second=1)


def test_config_error_even_for_unrelated_token() -> None:
    assert evaluate("other", "127.0.0.1", [BOT, {}], "wiki") == ConfigError(kind="ip_ranges", index=1)


@pytest.mark.parametrize(
    "entry, kind",
    [
        ({"username": "A", "token": "t"}, "ip_ranges"),
        ({"username": "A", "token": "t", "ip_ranges": None}, "ip_ranges"),
        ({"username": "A", "token": "t", "ip_ranges": "127.0.0.1"}, "ip_ranges"),
        ({"username": "A", "ip_ranges": []}, "token"),
        ({"username": "A", "token": "", "ip_ranges": []}, "token"),
        ({"username": "A", "token": 1234, "ip_ranges": []}, "token"),
        ({"token": "t", "ip_ranges": []}, "username"),
        ({"username": "", "token": "t", "ip_ranges": []}, "username"),
        ("not a mapping", "ip_ranges"),
        (None, "ip_ranges"),
        ({}, "ip_ranges"),
    ],
)
def test_entry_problem(entry: object, kind: str) -> None:
    assert entry_problem(entry) == kind


def test_valid_entries_have_no_problem() -> None:
    assert entry_problem(BOT) is None
    assert entry_problem({"username": "A", "token": "t", "ip_ranges": ()}) is None
    assert entry_problem(PrincipalConfig(username="A", token="t")) is None


def test_same_token_disjoint_ranges_are_not_ambiguous() -> None:
    table = [
        {"username": "Bot", "token": "secret", "ip_ranges": ["127.0.0.1"]},
        {"username": "Bot", "token": "secret", "ip_ranges": ["10.0.0.0/8"]},
    ]
    assert evaluate("secret", "127.0.0.1", table, "wiki").index == 0
    assert evaluate("secret", "10.1.2.3", table, "wiki").index == 1


def test_rotation_entries_give_distinct_sessions() -> None:
    table = [BOT, {"username": "Bot", "token": "secret2", "ip_ranges": ["127.0.0.1"]}]
    old = evaluate("secret", "127.0.0.1", table, "wiki")
    new = evaluate("secret2", "127.0.0.1", table, "wiki")
    assert old.username == new.username == "Bot"
    assert old.session_id != new.session_id


def test_empty_ip_ranges_never_match() -> None:
    entry = {"username": "Bot", "token": "secret", "ip_ranges": []}
    assert evaluate("secret", "127.0.0.1", [entry], "wiki") == NoMatch()


def test_malformed_range_is_a_non_match() -> None:
    bad = {"username": "Bot", "token": "secret", "ip_ranges": ["bogus"]}
    assert evaluate("secret", "127.0.0.1", [bad], "wiki") == NoMatch()
    mixed = {"username": "Bot", "token": "secret", "ip_ranges": ["bogus", "127.0.0.1"]}
    assert isinstance(evaluate("secret", "127.0.0.1", [mixed], "wiki"), Authenticated)


def test_empty_table() -> None:
    assert evaluate("secret", "127.0.0.1", [], "wiki") == NoMatch()


def test_principal_config_entries() -> None:
    entry = PrincipalConfig(username="Bot", token="secret", ip_ranges=("127.0.0.0/8",))
    outcome = evaluate("secret", "127.0.0.9", [entry], "wiki")
    assert isinstance(outcome, Authenticated)
    assert "secret" not in repr(entry)


def test_config_error_repr_hides_entry() -> None:
    outcome = evaluate("secret", "127.0.0.1", [{"token": "hunter2", "ip_ranges": []}], "wiki")
    assert isinstance(outcome, ConfigError)
    assert "hunter2" not in repr(outcome)


def test_session_id_uses_settings() -> None:
    outcome = evaluate("secret", "127.0.0.1", [BOT], "wiki", alg="sha512", secret_key="k")
    assert outcome.session_id == derive_session_id("wiki", "Bot", "secret", alg="sha512", secret_key="k")
    assert outcome.session_id != evaluate("secret", "127.0.0.1", [BOT], "otherwiki").session_id


def test_tokens_compared_in_constant_time(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    original = hmac.compare_digest

    def spy(a: bytes, b: bytes) -> bool:
        calls.append((a, b))
        return original(a, b)

    monkeypatch.setattr(matcher.hmac, "compare_digest", spy)
    other = {"username": "Other", "token": "different", "ip_ranges": ["127.0.0.1"]}
    evaluate("secret", "127.0.0.1", [other, BOT], "wiki")
    assert calls == [(b"different", b"secret"), (b"secret", b"secret")]


def test_tokens_equal() -> None:
    assert tokens_equal("secret", "secret")
    assert not tokens_equal("secret", "secreT")
    assert not tokens_equal("secret", "secret ")
    assert tokens_equal("sécret", "sécret")


def test_ip_not_checked_for_wrong_token(monkeypatch: pytest.MonkeyPatch) -> None:
    checked = []
    monkeypatch.setattr(matcher.iprange, "matches", lambda ip, ranges: checked.append(ip) or True)
    assert evaluate("wrong", "127.0.0.1", [BOT], "wiki") == NoMatch()
    assert checked == []


def test_lone_surrogate_token_is_a_non_match() -> None:
    assert not tokens_equal("secret", "\udc80")
    assert evaluate("\udc80", "127.0.0.1", [BOT], "wiki") == NoMatch()
    escaped = {"username": "Bot", "token": "s\udcffcret", "ip_ranges": ["127.0.0.1"]}
    assert isinstance(evaluate("s\udcffcret", "127.0.0.1", [escaped], "wiki"), Authenticated)
