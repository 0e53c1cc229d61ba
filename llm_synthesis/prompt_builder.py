"""Structured prompt builder for use-case generation."""

import json
from typing import Any, Dict

_EXAMPLE_OUTPUT = json.dumps(
    [
        {
            "title": "Merchant Partnership Scoring",
            "description": "Rank merchants by share of transaction volume to prioritise partnership offers.",
            "businessImpact": "Concentrates acquisition budget on merchants that already drive volume.",
            "priority": "High",
            "dataPatterns": "Merchant concentration; transaction amounts",
            "mermaidDiagram": "graph TD\n  Analyst[Analyst] --> UC1[Score Merchants]\n  UC1 --> DB[Transaction DB]",
        }
    ],
    indent=2,
)

_SYSTEM_INSTRUCTIONS = """\
You are a business analyst specializing in digital wallet and fintech solutions for Nepal.
Analyze the transaction data patterns below and generate 5-8 highly targeted business
use cases that directly address the stated business problem and scenario.

STRICT RULES:
- Base every use case on patterns actually present in the data analysis.
- Only propose solutions that can be built from the available columns.
- Keep use cases practical and implementable in the Nepali market.
- Respond with ONLY a JSON array. No text outside the array.
"""

_OUTPUT_FIELDS = """\
Each array item MUST be an object with exactly these fields:
- "title": use case title grounded in the data patterns
- "description": how the use case leverages the identified patterns
- "businessImpact": concrete business benefit addressing the stated problem
- "priority": one of "High", "Medium", "Low" (data availability and impact)
- "dataPatterns": the specific data patterns the use case relies on
- "mermaidDiagram": complete Mermaid "graph TD" diagram with actors, use cases,
  a dashed system boundary, data stores and labelled relationships
"""

_SECTION_TEMPLATE = """\
## {title}
{body}
"""


class UseCasePromptBuilder:
    """Builds a deterministic prompt for use-case generation.

    Combines the dataset summary, the optional business context and the
    structured pattern report into one prompt that asks the model for a
    JSON array of use cases.
    """

    def build_prompt(
        self,
        summary: str,
        patterns: Dict[str, Any],
        business_problem: str = "",
        business_scenario: str = "",
    ) -> str:
        """Build the full prompt.

        Args:
            summary: Plain-text dataset analysis.
            patterns: JSON-ready pattern report.
            business_problem: Optional free-text problem statement.
            business_scenario: Optional free-text scenario.

        Returns:
            A fully formatted prompt string ready for LLM consumption.
        """
        problem = business_problem.strip()
        scenario = business_scenario.strip()

        sections = [
            _SECTION_TEMPLATE.format(title="Data Analysis", body=summary.rstrip()),
            _SECTION_TEMPLATE.format(
                title="Pattern Analysis",
                body=f"```json\n{json.dumps(patterns, indent=2, default=str)}\n```",
            ),
        ]
        context = self._format_business_context(problem, scenario)
        if context:
            sections.append(_SECTION_TEMPLATE.format(title="Business Context", body=context))

        data_sections = "\n".join(sections)

        return (
            f"{_SYSTEM_INSTRUCTIONS}\n"
            f"# PROVIDED DATA\n\n{data_sections}\n"
            f"# OUTPUT FORMAT\n\n{_OUTPUT_FIELDS}\n"
            f"# EXAMPLE OUTPUT\n\n```json\n{_EXAMPLE_OUTPUT}\n```\n\n"
            f"# TASK\n\n{self._format_task(problem, scenario)}"
        )

    @staticmethod
    def _format_business_context(problem: str, scenario: str) -> str:
        lines = []
        if problem:
            lines.append(f"Problem: {problem}")
        if scenario:
            lines.append(f"Scenario: {scenario}")
        return "\n".join(lines)

    @staticmethod
    def _format_task(problem: str, scenario: str) -> str:
        steps = [
            "1. Review the transaction, merchant, category, geographic and user patterns above.",
            "2. Use the listed insights to decide which use cases matter most.",
        ]
        if problem:
            steps.append(f'3. Prioritise use cases that directly address the problem: "{problem}".')
        if scenario:
            steps.append(
                f'{len(steps) + 1}. Tailor location and market choices to the scenario: "{scenario}".'
            )
        steps.append(f"{len(steps) + 1}. Return the JSON array described above and nothing else.")
        return "\n".join(steps)
