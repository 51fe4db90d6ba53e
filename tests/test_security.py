from streamlauncher.security import PasswordHasher, hash_password, verify_password


def test_hash_and_verify():
    digest = hash_password("secret")
    assert digest != "secret"
    assert digest.startswith("$2")
    assert verify_password(digest, "secret")
    assert not verify_password(digest, "Secret")


def test_hashes_are_salted():
    hasher = PasswordHasher(rounds=4)
    assert hasher.hash("pw") != hasher.hash("pw")


def test_malformed_digest_never_verifies():
    assert not verify_password("", "secret")
    assert not verify_password("secret", "secret")
    assert not verify_password("$2b$04$short", "secret")


def test_long_passwords_are_accepted():
    hasher = PasswordHasher(rounds=4)
    long_pw = "x" * 200
    digest = hasher.hash(long_pw)
    assert hasher.verify(digest, long_pw)


def test_unicode_password():
    hasher = PasswordHasher(rounds=4)
    digest = hasher.hash("zażółć gęślą jaźń")
    assert hasher.verify(digest, "zażółć gęślą jaźń")


def test_hasher_uses_its_work_factor():
    assert PasswordHasher(rounds=4).hash("pw").startswith("$2b$04$")
    assert hash_password("pw", rounds=5).startswith("$2b$05$")
