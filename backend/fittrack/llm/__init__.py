"""
LLM plan generation package.

PlanGenerator wraps the OpenAI chat completions API and returns the raw
model text; parsing and persistence live in plan_parsing / plan_writer.
"""

from .planner import PlanGenerationError, PlanGenerator, get_plan_generator

__all__ = ["PlanGenerationError", "PlanGenerator", "get_plan_generator"]
