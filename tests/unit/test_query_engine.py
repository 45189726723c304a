"""Unit tests for filter matching, update operators and sorting."""
import pytest

from nomadnest.exceptions import InvalidQueryError
from nomadnest.services.query_engine import MISSING, apply_update, get_path, matches, sort_documents


POST = {
    "id": "p1",
    "title": "Hidden Beaches",
    "category": "Travel",
    "topics": ["Beach", "Nature"],
    "likes": 12,
    "author": {"name": "Sarah"},
    "status": "published",
}


class TestGetPath:
    def test_nested_and_list_index(self):
        doc = {"a": {"b": [{"c": 1}, {"c": 2}]}}
        assert get_path(doc, "a.b.1.c") == 2

    def test_missing_path(self):
        assert get_path(POST, "author.avatar") is MISSING
        assert get_path(POST, "topics.5") is MISSING


class TestMatches:
    def test_empty_query_matches_everything(self):
        assert matches(POST, None)
        assert matches(POST, {})

    def test_equality_and_array_membership(self):
        assert matches(POST, {"category": "Travel"})
        assert matches(POST, {"topics": "Beach"})
        assert not matches(POST, {"topics": "Food"})

    def test_none_matches_missing_field(self):
        assert matches(POST, {"bookingReference": None})
        assert not matches(POST, {"category": None})

    def test_comparison_operators(self):
        assert matches(POST, {"likes": {"$gte": 12, "$lt": 20}})
        assert not matches(POST, {"likes": {"$gt": 12}})

    def test_incompatible_comparison_is_false(self):
        assert not matches(POST, {"title": {"$gt": 5}})

    def test_ne_in_and_nin(self):
        assert matches(POST, {"status": {"$ne": "draft"}})
        assert matches(POST, {"category": {"$in": ["Food", "Travel"]}})
        assert not matches(POST, {"category": {"$nin": ["Travel"]}})

    def test_regex_case_insensitive(self):
        assert matches(POST, {"title": {"$regex": "beach", "$options": "i"}})
        assert not matches(POST, {"title": {"$regex": "beach"}})

    def test_logical_operators(self):
        assert matches(POST, {"$or": [{"category": "Food"}, {"likes": 12}]})
        assert not matches(POST, {"$and": [{"category": "Travel"}, {"likes": 0}]})
        assert matches(POST, {"$nor": [{"category": "Food"}]})

    def test_exists_size_all(self):
        assert matches(POST, {"author.name": {"$exists": True}})
        assert matches(POST, {"coverImage": {"$exists": False}})
        assert matches(POST, {"topics": {"$size": 2}})
        assert matches(POST, {"topics": {"$all": ["Nature", "Beach"]}})

    def test_id_matches_either_identity_field(self):
        assert matches({"_id": "x1"}, {"id": "x1"})
        assert matches({"id": "x1"}, {"_id": "x1"})

    def test_unknown_operator_raises(self):
        with pytest.raises(InvalidQueryError):
            matches(POST, {"likes": {"$near": 3}})
        with pytest.raises(InvalidQueryError):
            matches(POST, {"$where": "1"})

    def test_invalid_regex_raises(self):
        with pytest.raises(InvalidQueryError):
            matches(POST, {"title": {"$regex": "("}})


class TestApplyUpdate:
    def test_set_nested_and_inc(self):
        updated = apply_update(POST, {"$set": {"author.avatar": "a.png"}, "$inc": {"likes": -2}})
        assert updated["author"] == {"name": "Sarah", "avatar": "a.png"}
        assert updated["likes"] == 10
        assert POST["likes"] == 12

    def test_inc_creates_missing_field(self):
        assert apply_update({}, {"$inc": {"views": 1}}) == {"views": 1}

    def test_array_operators(self):
        doc = {"likedBy": ["u1"]}
        doc = apply_update(doc, {"$addToSet": {"likedBy": "u1"}})
        assert doc["likedBy"] == ["u1"]
        doc = apply_update(doc, {"$push": {"likedBy": "u2"}})
        doc = apply_update(doc, {"$pull": {"likedBy": "u1"}})
        assert doc["likedBy"] == ["u2"]

    def test_pull_with_condition(self):
        doc = {"attendees": [{"id": "a"}, {"id": "b"}]}
        assert apply_update(doc, {"$pull": {"attendees": {"id": "a"}}})["attendees"] == [{"id": "b"}]

    def test_unset(self):
        assert "moderationReason" not in apply_update(
            {"moderationReason": "x", "moderated": True}, {"$unset": {"moderationReason": ""}})

    def test_plain_merge_keeps_identity(self):
        updated = apply_update({"id": "p1", "title": "a"}, {"id": "other", "title": "b"})
        assert updated == {"id": "p1", "title": "b"}

    def test_identity_fields_are_immutable(self):
        with pytest.raises(InvalidQueryError):
            apply_update(POST, {"$set": {"id": "other"}})

    def test_unknown_update_operator(self):
        with pytest.raises(InvalidQueryError):
            apply_update(POST, {"$rename": {"title": "name"}})

    def test_inc_non_numeric(self):
        with pytest.raises(InvalidQueryError):
            apply_update(POST, {"$inc": {"title": 1}})


class TestSortDocuments:
    def test_multi_key_sort_with_missing_last(self):
        docs = [
            {"id": "a", "count": 2, "name": "b"},
            {"id": "b", "name": "a"},
            {"id": "c", "count": 5, "name": "c"},
            {"id": "d", "count": 2, "name": "a"},
        ]
        ordered = sort_documents(docs, [("count", -1), ("name", 1)])
        assert [d["id"] for d in ordered] == ["c", "d", "a", "b"]

    def test_no_sort_keeps_order(self):
        docs = [{"n": 2}, {"n": 1}]
        assert sort_documents(docs, None) == docs
