"""Core business logic.

Modules:
- exercise_types: Prompt variants and payload builder per exercise type
- grader: Answer comparison and verdicts
- validation: Input models for authoring actions
- auth: Request identity and admin checks
- authoring: Hierarchy and exercise actions for admins
- practice: Answer submission and attempt recording
- progress: Pure progress aggregation
- autosave: Debounced draft saving
"""

__all__ = [
    "exercise_types",
    "grader",
    "validation",
    "auth",
    "authoring",
    "practice",
    "progress",
    "autosave",
]
