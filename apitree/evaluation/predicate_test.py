"""Unit tests for body-assertion evaluation."""

from __future__ import annotations

import pytest

from apitree.evaluation.predicate import PredicateError, SimpleEvalEvaluator, is_truthy


@pytest.fixture
def evaluator():
    return SimpleEvalEvaluator()


class TestIsTruthy:
    """Truthiness coercion of expression results."""

    @pytest.mark.parametrize("value", [False, None, 0, 0.0, "", float("nan")])
    def test_falsy(self, value):
        assert is_truthy(value) is False

    @pytest.mark.parametrize("value", [True, 1, -1, 0.5, "0", "false", [], {}, [0]])
    def test_truthy(self, value):
        assert is_truthy(value) is True


class TestEvaluate:
    """Evaluation against a bound ``body`` document."""

    def test_attribute_access_on_object(self, evaluator):
        assert evaluator.evaluate({"id": 1}, "body.id == 1") is True

    def test_index_access(self, evaluator):
        document = {"items": [{"name": "a"}, {"name": "b"}]}
        assert evaluator.evaluate(document, 'body["items"][1]["name"] == "b"') is True

    def test_json_literals(self, evaluator):
        document = {"active": True, "deleted": False, "parent": None}
        assert evaluator.evaluate(document, "body.active == true") is True
        assert evaluator.evaluate(document, "body.deleted == false") is True
        assert evaluator.evaluate(document, "body.parent == null") is True

    def test_boolean_combination(self, evaluator):
        document = {"id": 7, "active": True}
        assert evaluator.evaluate(document, "body.id > 5 and body.active") is True
        assert evaluator.evaluate(document, "body.id < 5 or not body.active") is False

    def test_len_function(self, evaluator):
        assert evaluator.evaluate({"tags": [1, 2, 3]}, "len(body.tags) == 3") is True

    def test_false_comparison(self, evaluator):
        assert evaluator.evaluate({"id": 2}, "body.id == 1") is False

    def test_result_coerced(self, evaluator):
        assert evaluator.evaluate({"count": 0}, "body.count") is False
        assert evaluator.evaluate({"name": "x"}, "body.name") is True
        assert evaluator.evaluate({"tags": []}, "body.tags") is True

    def test_null_document(self, evaluator):
        """An unparseable response body is bound as null."""
        assert evaluator.evaluate(None, "body == null") is True

    def test_list_document(self, evaluator):
        assert evaluator.evaluate([1, 2], "body[0] == 1") is True

    def test_property_named_like_dict_method(self, evaluator):
        assert evaluator.evaluate({"items": []}, "body.items == []") is True
        assert evaluator.evaluate({"keys": ["a"]}, "body.keys[0] == \"a\"") is True
        assert evaluator.evaluate({"data": {"values": 3}}, "body.data.values == 3") is True


class TestErrors:
    """Evaluation errors are classified as syntax or runtime."""

    def test_syntax_error(self, evaluator):
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate({}, "body.id ==")
        assert exc_info.value.kind == "syntax"

    def test_unknown_name_is_runtime(self, evaluator):
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate({}, "response.id == 1")
        assert exc_info.value.kind == "runtime"

    def test_missing_key_is_runtime(self, evaluator):
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate({"id": 1}, 'body["missing"] == 1')
        assert exc_info.value.kind == "runtime"

    def test_missing_attribute_is_runtime(self, evaluator):
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate({"id": 1}, "body.missing == 1")
        assert exc_info.value.kind == "runtime"

    def test_attribute_on_null_is_runtime(self, evaluator):
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate(None, "body.id == 1")
        assert exc_info.value.kind == "runtime"

    def test_message_includes_kind(self, evaluator):
        with pytest.raises(PredicateError, match="syntax error"):
            evaluator.evaluate({}, "(")

    def test_missing_property_named_like_dict_method(self, evaluator):
        """``body.items`` on an object without ``items`` does not pass."""
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate({}, "body.items")
        assert exc_info.value.kind == "runtime"

    def test_deeply_nested_expression_raises_predicate_error(self, evaluator):
        with pytest.raises(PredicateError) as exc_info:
            evaluator.evaluate({}, "body == " + "-" * 5000 + "1")
        assert exc_info.value.kind in ("syntax", "runtime")
