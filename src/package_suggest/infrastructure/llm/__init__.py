"""Language-model adapters."""

from .sampling import LanguageModel, SamplingLanguageModel, language_model_from_context

__all__ = ["LanguageModel", "SamplingLanguageModel", "language_model_from_context"]
