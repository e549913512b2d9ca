"""Tests for typed, case-insensitive identifiers."""

import copy

import pytest
from pydantic import BaseModel, ValidationError

from core.domain.errors import IdentifierError
from core.domain.identifiers import (
    APIKey,
    Identifier,
    ModelId,
    ObjectType,
    OrganizationId,
    OwnerId,
    RequestId,
    ordinal_key,
)

ALL_KINDS = [APIKey, OrganizationId, OwnerId, ModelId, ObjectType, RequestId]


class TestParse:
    @pytest.mark.parametrize("kind", ALL_KINDS, ids=lambda c: c.__name__)
    def test_parse_trims(self, kind: type[Identifier]) -> None:
        assert str(kind.parse("  gpt-4  ")) == "gpt-4"

    @pytest.mark.parametrize("text", ["gpt-4", "text-curie:001", "Babbage-Similarity"])
    def test_to_string_preserves_case(self, text: str) -> None:
        assert str(ModelId.parse(text)) == text

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_parse_rejects_blank(self, text: str) -> None:
        with pytest.raises(IdentifierError):
            ModelId.parse(text)

    def test_identifier_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="model identification"):
            ModelId.parse("")

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_try_parse_returns_none(self, text: str | None) -> None:
        assert ModelId.try_parse(text) is None

    def test_try_parse_non_string(self) -> None:
        assert OwnerId.try_parse(42) is None  # type: ignore[arg-type]

    def test_try_parse_valid(self) -> None:
        assert OwnerId.try_parse(" openai ") == OwnerId("openai")


class TestEquality:
    def test_case_insensitive_equality(self) -> None:
        assert ModelId("GPT-4") == ModelId("gpt-4")

    def test_case_insensitive_hash(self) -> None:
        assert hash(ModelId("GPT-4")) == hash(ModelId("gpt-4"))

    def test_usable_as_dict_key(self) -> None:
        lookup = {ModelId("Davinci"): 1}
        assert lookup[ModelId("DAVINCI")] == 1

    def test_no_multi_character_folding(self) -> None:
        assert ModelId("straße") != ModelId("STRASSE")
        assert ModelId("straße") == ModelId("STRAßE")

    def test_non_ascii_single_character_case(self) -> None:
        assert OwnerId("Ñandú") == OwnerId("ñANDÚ")
        assert len({ModelId("a"), ModelId("A")}) == 1

    def test_different_kinds_never_equal(self) -> None:
        assert ModelId("openai") != OwnerId("openai")

    def test_not_equal_to_plain_string(self) -> None:
        assert ModelId("gpt-4") != "gpt-4"


class TestOrdering:
    def test_ordinal_ignore_case(self) -> None:
        assert ModelId("ada") < ModelId("Babbage")
        assert ModelId("Curie") > ModelId("babbage")
        assert ModelId("X") <= ModelId("x")

    def test_sorted(self) -> None:
        ids = [ModelId("curie"), ModelId("Ada"), ModelId("babbage")]
        assert [str(i) for i in sorted(ids)] == ["Ada", "babbage", "curie"]

    def test_ordinal_key_keeps_expanding_characters(self) -> None:
        assert ordinal_key("straße") == "STRAßE"
        assert ordinal_key("gpt-4o") == "GPT-4O"

    def test_mixed_kinds_raise(self) -> None:
        with pytest.raises(TypeError):
            ModelId("a") < OwnerId("b")  # noqa: B015


class TestImmutability:
    def test_cannot_set_attribute(self) -> None:
        model_id = ModelId("gpt-4")
        with pytest.raises(AttributeError):
            model_id._value = "other"  # type: ignore[misc]

    def test_clone_is_equal_and_distinct(self) -> None:
        original = ModelId("gpt-4")
        clone = original.clone()
        assert clone == original
        assert clone is not original
        assert type(clone) is ModelId

    def test_copy(self) -> None:
        original = RequestId("abc")
        assert copy.deepcopy(original) == original

    def test_api_key_repr_is_masked(self) -> None:
        assert "sk-secret-value" not in repr(APIKey("sk-secret-value"))
        assert str(APIKey("sk-secret-value")) == "sk-secret-value"


class _Holder(BaseModel):
    model_id: ModelId
    owner: OwnerId | None = None


class TestPydanticIntegration:
    def test_validates_from_string(self) -> None:
        holder = _Holder.model_validate({"model_id": " gpt-4 "})
        assert holder.model_id == ModelId("gpt-4")

    def test_rejects_blank(self) -> None:
        with pytest.raises(ValidationError):
            _Holder.model_validate({"model_id": "  "})

    def test_serializes_to_string(self) -> None:
        holder = _Holder(model_id=ModelId("gpt-4"), owner=OwnerId("openai"))
        assert holder.model_dump(mode="json") == {"model_id": "gpt-4", "owner": "openai"}
