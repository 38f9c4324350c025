from rpcproxy.build import BuildInfo, CompileInfo, GitInfo


def test_build_info_from_env(monkeypatch):
    monkeypatch.setenv("VERGEN_BUILD_SEMVER", "1.2.3")
    monkeypatch.setenv("VERGEN_CARGO_PROFILE", "release")
    monkeypatch.setenv("VERGEN_CARGO_FEATURES", "full")
    info = CompileInfo().build()
    assert info == BuildInfo(version="1.2.3", profile="release", features="full")


def test_git_info_from_env(monkeypatch):
    monkeypatch.setenv("VERGEN_GIT_SHA", "0123456789abcdef")
    monkeypatch.setenv("VERGEN_GIT_SEMVER", "v1.0.0")
    info = CompileInfo().git()
    assert info.hash == "0123456789abcdef"
    assert info.tag == "v1.0.0"
    assert info.short_hash() == "0123456"


def test_short_hash_of_short_value():
    assert GitInfo(hash="abc").short_hash() == "abc"


def test_short_hash_is_prefix():
    full = "fedcba9876543210"
    short = GitInfo(hash=full).short_hash()
    assert full.startswith(short)
    assert len(short) == 7


def test_missing_env_gives_empty(monkeypatch):
    monkeypatch.delenv("VERGEN_GIT_SHA", raising=False)
    monkeypatch.delenv("VERGEN_GIT_SEMVER", raising=False)
    assert GitInfo.from_env() == GitInfo()