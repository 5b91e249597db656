from workspace_mcp.pkce import s256_challenge, verify_s256

RFC_VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
RFC_CHALLENGE = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_matches_known_vector():
    assert verify_s256(RFC_VERIFIER, RFC_CHALLENGE)


def test_challenge_of_known_vector():
    assert s256_challenge(RFC_VERIFIER) == RFC_CHALLENGE


def test_rejects_wrong_verifier():
    challenge = s256_challenge("verifier-original")
    assert not verify_s256("not-the-verifier", challenge)


def test_rejects_empty_inputs():
    assert not verify_s256("", "x")
    assert not verify_s256("x", "")
    assert not verify_s256("", "")


def test_round_trip():
    verifier = "verifier-string-with-some-entropy-1234"
    assert verify_s256(verifier, s256_challenge(verifier))


def test_rejects_padded_challenge():
    assert not verify_s256(RFC_VERIFIER, RFC_CHALLENGE + "=")


def test_rejects_non_ascii_challenge():
    assert not verify_s256(RFC_VERIFIER, "é" * 43)