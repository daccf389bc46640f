"""Built-in model profiles and task metadata fallbacks."""

from typing import Dict, List

PHASES = ("spec", "planning", "coding", "qa")

DEFAULT_PHASE_MODELS: Dict[str, str] = {
    "spec": "sonnet",
    "planning": "sonnet",
    "coding": "sonnet",
    "qa": "haiku",
}

DEFAULT_PHASE_THINKING: Dict[str, str] = {
    "spec": "medium",
    "planning": "high",
    "coding": "medium",
    "qa": "low",
}

DEFAULT_MODEL_PROFILES: List[dict] = [
    {
        "name": "balanced",
        "description": "Balanced performance and cost using Sonnet for all phases",
        "phaseModels": {
            "spec": "sonnet",
            "planning": "sonnet",
            "coding": "sonnet",
            "qa": "sonnet",
        },
        "phaseThinking": {
            "spec": "medium",
            "planning": "high",
            "coding": "medium",
            "qa": "high",
        },
    },
    {
        "name": "cost-optimized",
        "description": "Cost-optimized profile using Haiku for spec and Sonnet elsewhere",
        "phaseModels": {
            "spec": "haiku",
            "planning": "sonnet",
            "coding": "sonnet",
            "qa": "sonnet",
        },
        "phaseThinking": {
            "spec": "low",
            "planning": "medium",
            "coding": "low",
            "qa": "medium",
        },
    },
    {
        "name": "quality-focused",
        "description": "Maximum quality using Opus for critical phases",
        "phaseModels": {
            "spec": "opus",
            "planning": "opus",
            "coding": "sonnet",
            "qa": "opus",
        },
        "phaseThinking": {
            "spec": "high",
            "planning": "ultrathink",
            "coding": "high",
            "qa": "ultrathink",
        },
    },
]

DEFAULT_PROJECT_CONFIG_NAME = "default"
