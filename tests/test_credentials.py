"""Unit tests for auth/credentials.py."""

from auth.credentials import SharedSecretVerifier


def test_exact_match_verifies() -> None:
    assert SharedSecretVerifier("s3cret-value").verify("s3cret-value") is True


def test_match_is_case_sensitive() -> None:
    assert SharedSecretVerifier("s3cret-value").verify("S3CRET-VALUE") is False


def test_prefix_is_not_a_match() -> None:
    assert SharedSecretVerifier("s3cret-value").verify("s3cret") is False


def test_empty_secret_never_matches() -> None:
    verifier = SharedSecretVerifier("")
    assert verifier.verify("") is False
    assert verifier.verify("anything-at-all") is False


def test_non_ascii_secret() -> None:
    assert SharedSecretVerifier("pässwörd-ünïcode").verify("pässwörd-ünïcode") is True
