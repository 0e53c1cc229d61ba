import json

import pytest
from pydantic import ValidationError

from llm_synthesis.schema import UseCase


def _payload() -> dict:
    return {
        "title": "Merchant Partnership Scoring",
        "description": "Rank merchants by share of volume.",
        "businessImpact": "Focuses partnership spend.",
        "priority": "High",
        "dataPatterns": "Merchant concentration",
        "mermaidDiagram": "graph TD\n  A[User] --> B[Pay]",
    }


def test_use_case_contract() -> None:
    use_case = UseCase.model_validate(_payload())

    assert use_case.business_impact == "Focuses partnership spend."
    assert set(use_case.model_dump(by_alias=True).keys()) == set(_payload().keys())

    parsed = json.loads(use_case.model_dump_json(by_alias=True))
    assert parsed["businessImpact"] == "Focuses partnership spend."
    assert parsed["mermaidDiagram"].startswith("graph TD")


def test_use_case_accepts_python_field_names() -> None:
    use_case = UseCase(
        title="T",
        description="D",
        business_impact="I",
        priority="Low",
    )

    assert use_case.mermaid_diagram == ""
    assert use_case.data_patterns is None


@pytest.mark.parametrize(("raw", "expected"), [("high", "High"), (" MEDIUM ", "Medium"), ("low", "Low")])
def test_priority_is_normalized(raw: str, expected: str) -> None:
    data = _payload()
    data["priority"] = raw

    assert UseCase.model_validate(data).priority == expected


def test_unknown_priority_is_rejected() -> None:
    data = _payload()
    data["priority"] = "Urgent"

    with pytest.raises(ValidationError):
        UseCase.model_validate(data)


def test_data_patterns_may_be_a_list() -> None:
    data = _payload()
    data["dataPatterns"] = ["Merchant concentration", "Geographic concentration"]

    assert UseCase.model_validate(data).data_patterns == [
        "Merchant concentration",
        "Geographic concentration",
    ]


def test_use_case_rejects_extra_fields() -> None:
    data = _payload()
    data["extra_field"] = "not allowed"

    with pytest.raises(ValidationError):
        UseCase.model_validate(data)


def test_use_case_is_frozen() -> None:
    use_case = UseCase.model_validate(_payload())

    with pytest.raises(ValidationError):
        use_case.title = "changed"  # type: ignore[misc]
