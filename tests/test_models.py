"""Tests for model helpers used around the scoring engine."""

import pytest

from wkpoule import db
from wkpoule.models import GlobalSetting, Match
from wkpoule.utils.cache_utils import cached_query, invalidate_model_cache


class TestMatch:
    def test_update_score_moves_pending_to_live(self, app, factory):
        match = factory.match()
        match.update_score(1, 0)
        assert match.status == "live"
        assert not match.is_scoreable

    def test_update_score_finished(self, app, factory):
        match = factory.match()
        match.update_score(1, 0, is_finished=True)
        assert match.is_scoreable

    def test_negative_score_rejected(self, app, factory):
        match = factory.match()
        with pytest.raises(ValueError):
            match.update_score(-1, 0)

    def test_finished_without_score_is_not_scoreable(self, app, factory):
        assert not factory.match(status="finished").is_scoreable
        assert factory.match(2, 2, status="finished").is_scoreable
        assert Match.scoreable_query().count() == 1


class TestPoule:
    def test_invite_code_generated(self, app, factory):
        assert len(factory.poule().invite_code) == 8

    def test_add_member_twice(self, app, factory):
        user = factory.user()
        poule = factory.poule(members=[user])

        _, message = poule.add_member(user)
        assert message == "User is already a member"
        assert poule.members.count() == 1


class TestGlobalSetting:
    def test_wk_results_without_finalist(self, app):
        GlobalSetting.set_wk_results("Argentina")
        db.session.commit()
        assert GlobalSetting.get_wk_results() == ("Argentina", None)

    def test_missing_value_default(self, app):
        assert GlobalSetting.get_value("nothing", default={}) == {}


class TestCachedQuery:
    def test_caches_until_invalidated(self, app):
        calls = []

        @cached_query("PouleMember")
        def load(poule_id):
            calls.append(poule_id)
            return {"poule_id": poule_id, "calls": len(calls)}

        assert load(1) == {"poule_id": 1, "calls": 1}
        assert load(1) == {"poule_id": 1, "calls": 1}

        invalidate_model_cache("PouleMember")
        assert load(1) == {"poule_id": 1, "calls": 2}

    def test_none_is_not_cached(self, app):
        calls = []

        @cached_query("PouleMember")
        def load():
            calls.append(1)
            return None

        load()
        load()
        assert len(calls) == 2
