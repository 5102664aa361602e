import pytest

from skillforge.errors import NotFound
from skillforge.models import User
from skillforge.progress.badges import assign_badge, award_score_badges


def _badges(db, user_id):
    db.expire_all()
    return db.get(User, user_id).badges


def test_assign_badge_is_idempotent(db, make_user):
    user_id = make_user()

    assert assign_badge(db, user_id, "Resume Pro") is True
    assert assign_badge(db, user_id, "Resume Pro") is False

    assert _badges(db, user_id) == ["Resume Pro"]


def test_badges_keep_award_order(db, make_user):
    user_id = make_user()
    assign_badge(db, user_id, "First Roadmap")
    assign_badge(db, user_id, "Resume Pro")

    assert _badges(db, user_id) == ["First Roadmap", "Resume Pro"]


def test_unknown_user(db):
    with pytest.raises(NotFound):
        assign_badge(db, 12345, "Resume Pro")


@pytest.mark.parametrize(
    "score, earned",
    [
        (97, ["Resume Pro", "Resume Elite"]),
        (95, ["Resume Pro", "Resume Elite"]),
        (85, ["Resume Pro"]),
        (80, ["Resume Pro"]),
        (79, []),
        (0, []),
    ],
)
def test_score_thresholds(db, make_user, score, earned):
    user_id = make_user()

    assert award_score_badges(db, user_id, score) == earned
    assert (_badges(db, user_id) or []) == earned


def test_rescoring_never_duplicates(db, make_user):
    user_id = make_user()
    award_score_badges(db, user_id, 85)

    assert award_score_badges(db, user_id, 97) == ["Resume Elite"]
    assert award_score_badges(db, user_id, 99) == []
    assert award_score_badges(db, user_id, 10) == []

    assert _badges(db, user_id) == ["Resume Pro", "Resume Elite"]
