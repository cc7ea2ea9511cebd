import pytest

from app.ride_analysis import clothing_recommendations


def hints(t_min, t_max, w_max=5.0, rain=0.0, temps_09_11=(), temps_11_18=(), **kwargs):
    return clothing_recommendations(t_min, t_max, w_max, rain, list(temps_09_11), list(temps_11_18), **kwargs)


def test_warm_day_shorts_and_jersey():
    out = hints(18, 25, w_max=10)
    assert "Bib Shorts" in out
    assert "Jersey" in out
    assert "Winter Jacket" not in out
    assert "Vest" not in out and "Jacket" not in out


@pytest.mark.parametrize("t_max", [4.9, 0.0, -10.0])
def test_too_cold_gives_nothing(t_max):
    assert hints(-5, t_max, w_max=30, mountain=True) == []


def test_windy_mountain_day_gets_jacket():
    out = hints(2, 16, w_max=20, mountain=True)
    assert "Jacket" in out
    assert "Vest" not in out


def test_calm_lowland_protection_is_vest():
    out = hints(11, 16, w_max=8)
    assert "Vest" in out
    assert out == ["Bib Shorts", "Leg or Knee Warmers", "Long Sleeve Jersey Hot", "Vest", "Toe covers"]


def test_mountain_city_forces_jacket_in_calm_weather():
    assert "Jacket" in hints(11, 16, w_max=8, mountain=True)


def test_winter_jacket_replaces_jersey_and_outer_layer():
    out = hints(2, 7, w_max=20)
    assert "Winter Jacket" in out
    for tag in ("Jersey", "Long Sleeve Jersey Cold", "Long Sleeve Jersey Hot", "Vest", "Jacket"):
        assert tag not in out
    assert out == ["Bib Tights", "Winter Jacket", "Oversocks", "Buff"]


def test_rainy_day_with_wet_morning_gives_nothing():
    assert hints(10, 18, rain=2.0, morning_ride_suitable=False) == []


def test_rainy_afternoon_with_dry_morning_still_recommends():
    assert hints(10, 18, rain=2.0, morning_ride_suitable=True) != []


def test_arm_warmers_downgrade_hot_long_sleeve():
    out = hints(13, 21, temps_09_11=[13, 14, 15], temps_11_18=[15, 18, 21])
    assert "Arm Warmers" in out
    assert "Jersey" in out
    assert "Long Sleeve Jersey Hot" not in out


def test_arm_warmers_need_both_windows():
    assert "Arm Warmers" not in hints(13, 21, temps_09_11=[13, 14], temps_11_18=[])
    assert "Arm Warmers" not in hints(17, 21, temps_09_11=[17, 18], temps_11_18=[19, 21])


def test_cold_jersey_band_and_tights():
    out = hints(9, 13)
    assert out[:2] == ["Bib Tights", "Long Sleeve Jersey Cold"]
    assert "Toe covers" in out


def test_hints_are_unique_and_ordered():
    out = hints(3, 12, w_max=25)
    assert len(out) == len(set(out))
    assert out == ["Bib Tights", "Long Sleeve Jersey Cold", "Jacket", "Oversocks", "Buff"]
