from app.models import GameProfile


def _profile(level: int = 1, xp: int = 0) -> GameProfile:
    return GameProfile(user_id=1, level=level, xp=xp, is_active=True, stats={}, settings={})


def test_xp_for_next_level_is_linear():
    assert _profile(level=1).xp_for_next_level() == 1000
    assert _profile(level=4).xp_for_next_level() == 4000


def test_add_xp_climbs_multiple_levels_in_one_call():
    profile = _profile()

    assert profile.add_xp(2500) is True
    assert profile.level == 3
    assert profile.xp == 2500


def test_add_xp_without_level_up():
    profile = _profile()

    assert profile.add_xp(999) is False
    assert profile.level == 1


def test_add_xp_exact_threshold_levels_up():
    profile = _profile()

    assert profile.add_xp(1000) is True
    assert profile.level == 2


def test_xp_progress_within_band():
    assert _profile().xp_progress() == 0.0
    assert _profile(level=1, xp=250).xp_progress() == 25.0
    assert _profile(level=2, xp=1500).xp_progress() == 50.0
    assert _profile(level=3, xp=2500).xp_progress() == 50.0


def test_stats_and_settings_bags():
    profile = _profile()

    assert profile.get_stat("wins") is None
    profile.set_stat("wins", 12)
    profile.set_setting("theme", {"mode": "dark"})

    assert profile.get_stat("wins") == 12
    assert profile.get_setting("theme") == {"mode": "dark"}
    assert profile.settings == {"theme": {"mode": "dark"}}
