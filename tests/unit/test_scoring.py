import services.scoring as scoring


SCORES = [90, 80, 70, 60, 50, 40]


def test_zero_ai_total_falls_back_to_mean():
    assert scoring.compute_total_score(SCORES, 0) == 65


def test_positive_ai_total_is_used():
    assert scoring.compute_total_score(SCORES, 78) == 78


def test_invalid_ai_total_falls_back_to_mean():
    assert scoring.compute_total_score(SCORES, 130) == 65
    assert scoring.compute_total_score(SCORES, "78") == 65
    assert scoring.compute_total_score(SCORES, None) == 65


def test_mean_ignores_invalid_scores_and_rounds_half_up():
    assert scoring.mean_score([71, 72, None, "x", 150, -1]) == 72
    assert scoring.mean_score([70, 71]) == 71


def test_mean_without_valid_scores_is_zero():
    assert scoring.compute_total_score([None, None], 0) == 0


def test_heal_total_score():
    assert scoring.heal_total_score(0, SCORES) == 65
    assert scoring.heal_total_score(65, SCORES) is None
    assert scoring.heal_total_score(0, [None]) is None


def test_ai_total_rounding_to_zero_falls_back_to_mean():
    assert scoring.compute_total_score(SCORES, 0.4) == 65
    assert scoring.compute_total_score(SCORES, 0.5) == 1
