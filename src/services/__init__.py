"""
Services Package

- conversion: UI messages to model messages
- generation: GenerationEngine (complete, stream, raw UI stream)
"""

from src.services.conversion import to_model_messages
from src.services.generation import GenerationEngine, build_call_parameters

__all__ = ["GenerationEngine", "build_call_parameters", "to_model_messages"]
