"""Prompt templates for the two decomposition calls.

Phase 1 asks for the real-world standard procedure behind an objective; phase 2 feeds that
procedure back and asks for a JSON goal/subgoal/action breakdown.
"""

from __future__ import annotations

# Markers the offline stub uses to tell the two prompts apart.
STANDARD_PROCEDURE_MARKER = "hierarchical analysis of the current standard procedure"
DECOMPOSITION_MARKER = "decompose this objective into goals"

STANDARD_PROCEDURE_PROMPT = """Objective: {objective}

Provide a detailed hierarchical analysis of the current standard procedure for this objective in pharmaceutical manufacturing, including:

1. All sequential phases of the process
2. Sub-stages within each phase
3. Specific tasks performed at each level
4. Personnel responsible for each task
5. Methodologies and tools employed
6. Documentation requirements
7. Decision points and escalation pathways
8. Regulatory considerations
9. Timeline expectations for each phase
10. Cross-functional interactions and handoffs

Format your response as a well-structured markdown document with clear headings, subheadings, bullet points, and numbered lists to represent the hierarchical nature of the procedure. Use headers (# for main phases, ## for sub-stages, ### for tasks), bullet points, numbered lists, tables, and emphasis where appropriate to make the information clear and easy to navigate.
"""

ACTION_DECOMPOSITION_PROMPT = """Standard Procedure:
```{standard_procedure}```

Now while keeping scope to the objective given below Objective: ```{objective}```
I want to decompose this objective into goals, their sub goals and their actions. Each action is a unit level work that the system can perform in order to progress further in the goal. The core idea is that an objective broken down into meaningful goals can be executed autonomously by a system which also has LLM capability. It may have checkpoints where it requires user approval before proceeding further. Ensure each action is detailed enough.

Decompose my objective and give it to me in JSON:

```json
{{
  "agentName": "Short name for an agent pursuing this objective",
  "goals": [
    {{
      "name": "Goal name",
      "description": "Goal description",
      "subgoals": [
        {{
          "name": "Subgoal name",
          "description": "Subgoal description",
          "actions": [
            "Detailed action 1",
            "Detailed action 2",
            "Detailed action 3"
          ]
        }}
      ]
    }}
  ]
}}
```
"""


def format_standard_procedure_prompt(objective: str) -> str:
    return STANDARD_PROCEDURE_PROMPT.format(objective=objective)


def format_action_decomposition_prompt(objective: str, standard_procedure: str) -> str:
    return ACTION_DECOMPOSITION_PROMPT.format(
        objective=objective, standard_procedure=standard_procedure
    )
